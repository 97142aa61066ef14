from slot_booking.domain.entities.service_option import ServiceOption

DEFAULT_SERVICES: list[ServiceOption] = [
    ServiceOption(name="Classic haircut", duration_minutes=30),
    ServiceOption(name="Haircut and beard trim", duration_minutes=60),
    ServiceOption(name="Beard trim", duration_minutes=30),
    ServiceOption(name="Kids haircut", duration_minutes=30),
    ServiceOption(name="Long hair cut and styling", duration_minutes=90),
]
