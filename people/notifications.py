def notification(title: str, description: str = "", *, destructive: bool = False) -> dict:
    """
    Toast-style message returned with every outcome.
    """
    return {
        "title": title,
        "description": description,
        "variant": "destructive" if destructive else "default",
    }
