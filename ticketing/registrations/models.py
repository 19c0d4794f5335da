from enum import StrEnum


class RegistrationStatus(StrEnum):
    confirmed = "confirmed"
    checked_in = "checked_in"
    cancelled = "cancelled"
