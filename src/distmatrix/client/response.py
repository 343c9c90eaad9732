"""Response formatting bridge -- maps distance matrix data to the output system.

After a request completes, :func:`format_matrix_response` renders the
decoded body through :class:`~distmatrix.output.OutputManager`: JSON and
plain modes print the body as-is, Rich mode prints a table of
``duration / distance`` per origin and destination pair.

See Also:
    :mod:`distmatrix.output` -- the output manager that renders data.
"""

from __future__ import annotations

from typing import Any

from distmatrix.output import OutputFormat, get_output


def format_matrix_response(data: dict[str, Any]) -> None:
    """Print *data* with the global output manager.

    Args:
        data: The decoded service response.
    """
    output = get_output()
    output.info(f"Status {data.get('status', 'UNKNOWN')}")

    if output.format != OutputFormat.RICH:
        output.format_response(data)
        return

    headers, rows = matrix_table(data)
    if rows:
        output.print_table(headers, rows, title="Distance matrix")
    else:
        output.format_response(data)


def matrix_table(data: dict[str, Any]) -> tuple[list[str], list[list[str]]]:
    """Flatten a response into table headers and rows.

    Returns one row per origin; each cell reads ``"<duration> / <distance>"``
    or the element status when the pair has no route.
    """
    destinations = [str(d) for d in data.get("destination_addresses", [])]
    origins = [str(o) for o in data.get("origin_addresses", [])]
    headers = ["origin", *destinations]

    rows: list[list[str]] = []
    for origin, row in zip(origins, data.get("rows", [])):
        cells = [origin]
        for element in row.get("elements", []):
            cells.append(_element_text(element))
        rows.append(cells)
    return headers, rows


def _element_text(element: dict[str, Any]) -> str:
    status = element.get("status", "UNKNOWN")
    if status != "OK":
        return status
    duration = element.get("duration_in_traffic") or element.get("duration") or {}
    distance = element.get("distance") or {}
    return f"{duration.get('text', '?')} / {distance.get('text', '?')}"
