from enum import StrEnum


class EventStatus(StrEnum):
    draft = "draft"
    published = "published"
    cancelled = "cancelled"
    completed = "completed"


class EventWindow(StrEnum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    past = "past"


# Event columns a partial update may change
UPDATABLE_FIELDS = (
    "title",
    "description",
    "start_date",
    "end_date",
    "location",
    "capacity",
    "image_url",
)
