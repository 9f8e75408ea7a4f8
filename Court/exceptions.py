from rest_framework import status
from rest_framework.exceptions import APIException


class SlotAlreadyBooked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The selected time slot is not available"
    default_code = "SLOT_NO_LONGER_AVAILABLE"


class CourtUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Court is not available for booking"
    default_code = "COURT_UNAVAILABLE"


class InvalidStateTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid booking status change"
    default_code = "INVALID_STATUS"


class NotCourtOwner(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not the owner of this court"
    default_code = "NOT_COURT_OWNER"


class PaymentError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payment could not be processed"
    default_code = "PAYMENT_ERROR"


class JoinRequestError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Join request could not be processed"
    default_code = "JOIN_REQUEST_ERROR"
