from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidPromotion(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid promotion code"
    default_code = "INVALID_PROMOTION"
