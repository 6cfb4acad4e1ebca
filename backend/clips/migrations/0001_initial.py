import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Video',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('video_id', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('organization_id', models.UUIDField(blank=True, null=True)),
                ('title', models.CharField(max_length=255)),
                ('source_type', models.CharField(choices=[('upload', 'Upload'), ('youtube', 'YouTube')], default='upload', max_length=20)),
                ('source_url', models.URLField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('file_path', models.CharField(blank=True, max_length=500, null=True)),
                ('thumbnail_path', models.CharField(blank=True, max_length=500, null=True)),
                ('status', models.CharField(choices=[('downloading', 'Downloading'), ('processing', 'Processing'), ('analyzing', 'Analyzing'), ('ready', 'Ready'), ('analyzed', 'Analyzed'), ('analysis_error', 'Analysis error'), ('transcribing', 'Transcribing'), ('transcribed', 'Transcribed'), ('transcription_error', 'Transcription error'), ('error', 'Error')], default='processing', max_length=20)),
                ('duration', models.FloatField(blank=True, null=True)),
                ('resolution', models.CharField(blank=True, max_length=20, null=True)),
                ('stage_started_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['organization_id', '-created_at'], name='clips_video_organiz_5d1f0c_idx'),
                    models.Index(fields=['status'], name='clips_video_status_8a2c3e_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transcript',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transcript_id', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('full_text', models.TextField(blank=True, default='')),
                ('segments', models.JSONField(default=list)),
                ('language', models.CharField(default='en', max_length=10)),
                ('duration', models.FloatField(blank=True, null=True)),
                ('provider', models.CharField(default='whisper', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('video', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='transcript', to='clips.video')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Clip',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('clip_id', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('start_time', models.FloatField(default=0)),
                ('end_time', models.FloatField(default=0)),
                ('duration', models.FloatField(default=0)),
                ('source', models.CharField(choices=[('ai_transcript', 'AI (transcript)'), ('ai_video', 'AI (video)'), ('fallback', 'Fallback')], default='fallback', max_length=20)),
                ('detection_rank', models.IntegerField(default=0)),
                ('virality_score', models.IntegerField(default=0)),
                ('score_hook', models.IntegerField(default=0)),
                ('score_emotion', models.IntegerField(default=0)),
                ('score_insight', models.IntegerField(default=0)),
                ('score_cta', models.IntegerField(default=0)),
                ('score_quality', models.IntegerField(default=0)),
                ('transcript', models.TextField(blank=True, default='')),
                ('transcript_segments', models.JSONField(blank=True, default=list)),
                ('suggested_caption', models.TextField(blank=True, default='')),
                ('caption_style', models.JSONField(blank=True, default=dict)),
                ('aspect_ratio', models.CharField(choices=[('9:16', '9:16'), ('1:1', '1:1'), ('4:5', '4:5'), ('16:9', '16:9')], default='9:16', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('export_status', models.CharField(blank=True, choices=[('exporting', 'Exporting'), ('exported', 'Exported'), ('export_error', 'Export error')], max_length=20, null=True)),
                ('export_started_at', models.DateTimeField(blank=True, null=True)),
                ('exported_path', models.CharField(blank=True, max_length=500, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('video', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='clips', to='clips.video')),
            ],
            options={
                'ordering': ['-virality_score', 'detection_rank'],
                'indexes': [
                    models.Index(fields=['video', '-virality_score'], name='clips_clip_video_i_3b7e91_idx'),
                    models.Index(fields=['status'], name='clips_clip_status_c4d2a0_idx'),
                ],
            },
        ),
    ]
