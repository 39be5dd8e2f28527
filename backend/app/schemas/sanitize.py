import nh3


def clean_text(value):
    """Strip markup and surrounding whitespace from user-supplied text.

    Script and style elements are dropped along with their content; other
    tags are removed and their text kept. Non-string values pass through.
    """
    if not isinstance(value, str):
        return value
    return nh3.clean(value.strip(), tags=set()).strip()


def strip_text(value):
    return value.strip() if isinstance(value, str) else value
