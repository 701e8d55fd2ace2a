from enum import Enum


class ContentCategory(str, Enum):
    """Content categories, stored as their lowercase value."""

    MUSIC = "music"
    PODCAST = "podcast"
    ARTICLE = "article"
    VIDEO = "video"
    ART = "art"
    MOTIVATION = "motivation"
    BUSINESS = "business"
    EDUCATION = "education"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: "str | ContentCategory") -> "ContentCategory":
        """Case-insensitive lookup, raises ValueError for unknown categories."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"category must be one of {cls.values()}, got: {value}")
