from rsvp_checkin.routers.healthz import router as healthz

__all__ = [
    "healthz",
]
