from rest_framework import status
from rest_framework.exceptions import APIException


class InsufficientPoints(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient reward points"
    default_code = "INSUFFICIENT_POINTS"


class RewardUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Reward is not active"
    default_code = "REWARD_UNAVAILABLE"
