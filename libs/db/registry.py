"""Import every service's models so ``Base.metadata`` is complete."""


def import_all_models() -> None:
    from services.ai_service import models as _ai_models  # noqa: F401
    from services.attendance_service import models as _attendance_models  # noqa: F401
    from services.members_service import models as _member_models  # noqa: F401
    from services.payments_service import models as _payment_models  # noqa: F401
