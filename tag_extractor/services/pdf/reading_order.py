"""Reading-order reconstruction of text elements.

Elements are clustered into lines by baseline proximity, each line is read
left to right, and lines are read top to bottom. Thresholds are relative to
the font size so the same rules apply to any document scale.
"""

from tag_extractor.services.pdf.models import TextElement

SAME_LINE_RATIO = 0.5  # of the taller element's height
LINE_BREAK_RATIO = 1.2  # of the current element's height
PARAGRAPH_BREAK_RATIO = 2.5
WORD_GAP_RATIO = 0.3  # of the current element's width


def group_into_lines(elements: list[TextElement]) -> list[list[TextElement]]:
    """
    Cluster elements into lines.

    Elements are visited top to bottom; an element joins the current line when
    its y lies within half a line height of the line's first element,
    otherwise it starts a new line. Each line is then ordered by x, with the
    input order breaking ties.

    Args:
        elements: Elements in any order

    Returns:
        Lines in top-to-bottom order, each in left-to-right order
    """
    indexed = sorted(
        enumerate(elements),
        key=lambda item: (item[1].position.y, item[1].position.x, item[0]),
    )

    lines: list[list[tuple[int, TextElement]]] = []
    line_y = 0.0
    line_height = 0.0

    for index, element in indexed:
        if lines:
            threshold = max(element.height, line_height) * SAME_LINE_RATIO
            if abs(element.position.y - line_y) <= threshold:
                lines[-1].append((index, element))
                line_height = max(line_height, element.height)
                continue

        lines.append([(index, element)])
        line_y = element.position.y
        line_height = element.height

    return [
        [element for _, element in sorted(line, key=lambda item: (item[1].position.x, item[0]))]
        for line in lines
    ]


def sort_reading_order(elements: list[TextElement]) -> list[TextElement]:
    """Return elements in reading order."""
    return [element for line in group_into_lines(elements) for element in line]


def format_text_elements(elements: list[TextElement]) -> str:
    """
    Join elements into text with line, paragraph and word breaks.

    The output is not normalized; see normalize.normalize_text.
    """
    if not elements:
        return ""

    parts: list[str] = []
    previous: TextElement | None = None

    for element in sort_reading_order(elements):
        if previous is not None:
            parts.append(_separator(previous, element))
        parts.append(element.text)
        previous = element

    return "".join(parts)


def _separator(previous: TextElement, current: TextElement) -> str:
    y_diff = abs(current.position.y - previous.position.y)

    if y_diff > current.height * PARAGRAPH_BREAK_RATIO:
        return "\n\n"
    if y_diff > current.height * LINE_BREAK_RATIO:
        return "\n"

    x_diff = current.position.x - (previous.position.x + previous.width)
    if x_diff > current.width * WORD_GAP_RATIO:
        return " "
    return ""
