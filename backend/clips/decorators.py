"""
Decorators das views: tradução de erros do pipeline para respostas HTTP.
"""

import logging
from functools import wraps

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response

from .exceptions import ClipPipelineError

logger = logging.getLogger(__name__)


def handle_pipeline_errors(view_func):
    """
    Converte ClipPipelineError em {"error_code", "error"} com o status HTTP
    da exceção. Qualquer outro erro vira 500 e é logado com traceback.

    Deve ficar abaixo de @api_view.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ClipPipelineError as e:
            if e.http_status >= 500:
                logger.error(f"[api] {view_func.__name__}: {e.error_code} {e.message}")
            return Response(e.to_dict(), status=e.http_status)
        except APIException:
            # ParseError, MethodNotAllowed etc. seguem o handler padrão do DRF
            raise
        except Exception as e:
            logger.error(f"[api] Erro inesperado em {view_func.__name__}: {e}", exc_info=True)
            return Response(
                {"error_code": "INTERNAL_ERROR", "error": "Internal server error"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    return wrapper
