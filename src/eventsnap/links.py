def upload_url(base_url: str, public_event_id: str) -> str:
    return f"{base_url.rstrip('/')}/upload/{public_event_id}"


def gallery_url(base_url: str, public_event_id: str) -> str:
    return f"{base_url.rstrip('/')}/gallery/{public_event_id}"
