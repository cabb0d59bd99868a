import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.core.exceptions import status_code_for

logger = logging.getLogger(__name__)


class BaseResponseMixin:
    """
    Standardizes API responses across the application:
    {
        "status": "success" | "error",
        "status_code": int,
        "message": str,
        "data": Any | None
    }
    """

    def success_response(
        self, data=None, message="Success", status_code=status.HTTP_200_OK
    ):
        response_data = {
            "status": "success",
            "status_code": status_code,
            "message": message,
            "data": data,
        }
        return Response(response_data, status=status_code)

    def error_response(
        self,
        message="An error occurred",
        status_code=status.HTTP_400_BAD_REQUEST,
        data=None,
        error=None,
    ):
        response_data = {
            "status": "error",
            "status_code": status_code,
            "message": message,
            "error": error,
            "data": data,
        }
        return Response(response_data, status=status_code)

    def result_response(
        self,
        result,
        serialize=None,
        message="Success",
        status_code=status.HTTP_200_OK,
    ):
        """
        Turn an ``ActionResult`` into a response. `serialize` maps the
        success payload to JSON-ready data.
        """
        if not result.success:
            return self.error_response(
                message=result.message,
                status_code=status_code_for(result.error),
                error=result.error,
            )
        data = serialize(result.data) if serialize else result.data
        return self.success_response(
            data=data, message=result.message or message, status_code=status_code
        )


class BaseViewSet(viewsets.GenericViewSet, BaseResponseMixin):
    """
    Viewset whose actions delegate to service functions and answer in the
    standard envelope.
    """

    def serializer_context(self):
        return {"request": self.request, "view": self}

    def validated_input(self, serializer_class, data=None):
        """Validate request data; returns (validated_data, error_response)."""
        serializer = serializer_class(
            data=self.request.data if data is None else data,
            context=self.serializer_context(),
        )
        if not serializer.is_valid():
            logger.info(f"Rejected input for {self.__class__.__name__}: {serializer.errors}")
            return None, self.error_response(
                message="Validation failed",
                status_code=status.HTTP_400_BAD_REQUEST,
                data=serializer.errors,
            )
        return serializer.validated_data, None
