from .formatting import english_enumerate, format_path  # noqa
