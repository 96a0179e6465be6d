from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_error(e: BaseException) -> str:
    if str(e):
        return f"{type(e).__name__}: {e}"
    else:
        return type(e).__name__


def str_to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    value = str(value).strip().lower()
    if value in {"true", "1", "yes", "on"}:
        return True
    if value in {"false", "0", "no", "off", ""}:
        return False
    raise ValueError(f"Cannot interpret {value!r} as boolean")
