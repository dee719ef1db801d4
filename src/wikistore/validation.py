"""Rules a page submission must satisfy before it reaches the store."""

from typing import Dict, List

from .naming import names_match
from .types import PageInput

FieldErrors = Dict[str, List[str]]


def validate_page_input(
    page_input: PageInput, route_name: str, home_page_name: str
) -> FieldErrors:
    """Validate a page submission made under ``route_name``.

    Args:
        page_input: The submitted page
        route_name: Name of the page the form was posted to
        home_page_name: Name of the wiki's home page

    Returns:
        Mapping of field name to error messages, empty when the input is valid
    """
    errors: FieldErrors = {}

    def add(field: str, message: str) -> None:
        errors.setdefault(field, []).append(message)

    if not page_input.name or not page_input.name.strip():
        add("Name", "Name is required")

    # The home page keeps its name when edited through its own route
    if names_match(route_name, home_page_name) and page_input.name != home_page_name:
        add(
            "Name",
            f"You cannot modify home page name. Please keep it {home_page_name}",
        )

    if not page_input.content or not page_input.content.strip():
        add("Content", "Content is required")

    return errors
