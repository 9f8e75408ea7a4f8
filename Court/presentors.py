from Court.models import Court
from Court.serializers import CourtSerializer


def build_owner_login_payload(user):
    courts = Court.objects.filter(owner=user).select_related("owner")

    return {
        "business_key": f"COURT{user.id}",
        "approval_status": user.approval_status,
        "owner_details": {
            "full_name": user.full_name,
            "role": user.role,
            "email": user.email,
            "phone_number": user.phone_number,
            "location": user.location,
        },
        "courts": CourtSerializer(courts, many=True).data,
    }
