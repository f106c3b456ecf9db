# cleanup for text coming out of pdf extraction or ocr
import re
from typing import Optional

# c0/c1 control characters except tab, newline and carriage return
CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
# replacement character plus the rest of the unicode specials block
SPECIALS = re.compile(r'[\ufff0-\uffff]')
EXCESS_NEWLINES = re.compile(r'\n{4,}')


def sanitize_extracted_text(text: Optional[str]) -> str:
    """Remove control characters and invalid unicode while keeping paragraph structure"""
    if not text:
        return ""

    sanitized = CONTROL_CHARS.sub('', text)
    sanitized = SPECIALS.sub('', sanitized)

    # normalize line breaks to \n
    sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

    # keep paragraph gaps but never more than two blank lines
    sanitized = EXCESS_NEWLINES.sub('\n\n\n', sanitized)

    return sanitized.strip()
