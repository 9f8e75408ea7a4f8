class NotificationType:
    ACCOUNT = "account"
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMATION = "booking_confirmation"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    PAYMENT_REFUNDED = "payment_refunded"
    REFUND_REQUESTED = "refund_requested"
    OWNER_APPROVAL = "owner_approval"
    JOIN_REQUEST = "join_request"
    JOIN_REQUEST_RESPONSE = "join_request_response"
    REWARD_POINTS = "reward_points"
    REWARD_REDEMPTION = "reward_redemption"
    REWARD_SUMMARY = "reward_summary"
    POINTS_EXPIRY = "points_expiry"
    PROMOTION = "promotion"
    PROMOTION_EXPIRY = "promotion_expiry"
    SYSTEM = "system"
