from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('clips', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='clip',
            name='thumbnail_path',
            field=models.CharField(blank=True, max_length=500, null=True),
        ),
    ]
