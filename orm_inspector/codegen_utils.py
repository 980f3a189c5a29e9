import logging

from black import FileMode, NothingChanged, format_str


logger = logging.getLogger(__name__)

BLACK_FORMATTER_MODE = FileMode(line_length=120)


def format_python_code_using_black(name: str, code_string: str) -> str:
    """
    Formats the given Python code using Black.

    Raises:
        black.InvalidInput: If the code does not parse
    """
    try:
        formatted_code = format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {name}")
        return formatted_code
    except NothingChanged:
        logger.debug(f"Black formatter did not change the code: {name}")
        return code_string
