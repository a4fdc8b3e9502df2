"""Cover letter prompt and the cleanup pass applied to generated letters.

Cleanup runs as a fixed sequence of steps, each a small function:

1. strip code fences
2. cut leaked prompt text (from a marker line up to the next salutation)
3. locate the first salutation, drop it and everything before it
4. truncate at a second salutation (the model repeated the letter)
5. locate the closing phrase and drop it with the signature below it
6. drop resume fragments (contact lines, bullets, section headers)
7. normalize whitespace

The steps are repeated until the text stops changing, so cleaning already
clean text is a no-op.
"""

from __future__ import annotations

import re

from jd_match.utils.json_parser import strip_code_fences

MIN_LETTER_LENGTH = 100

FALLBACK_LETTER = (
    "I am excited to apply for this position. The role closely matches the work I have been doing, "
    "and I am confident that my technical background and my habit of delivering reliable, "
    "well-tested software would let me contribute from the first weeks on the team.\n\n"
    "In my recent roles I have owned features from design through production, collaborated closely "
    "with product and engineering colleagues, and kept a steady focus on measurable results. "
    "I enjoy learning new tools quickly and adapting to the needs of the people I build for.\n\n"
    "I would welcome the opportunity to discuss how my experience can support your goals. "
    "Thank you for taking the time to review my application."
)

SYSTEM_PROMPT = """\
You write concise, specific cover letters for software and technology roles.
Write in the first person, in three or four short paragraphs.
Output the letter body only: no salutation line, no closing phrase, no signature,
no placeholders, no markdown and no commentary before or after the letter."""

_SALUTATION = re.compile(
    r"^[ \t]*(?:dear\b[^,:\n]{0,80}[,:]?|to whom it may concern[,:]?)[ \t]*",
    re.IGNORECASE | re.MULTILINE,
)
_CLOSING = re.compile(
    r"^[ \t]*(?:sincerely|best regards|kind regards|warm regards|warmest regards|regards|best|"
    r"respectfully|cheers|thank you|thanks|yours (?:truly|sincerely|faithfully))"
    r"[ \t]*[,.!]?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
_LEAK_MARKER = re.compile(
    r"^[ \t]*(?:job description|job posting|resume|candidate resume|instructions|critical rules|"
    r"output format|here is (?:the|your) cover letter|here's (?:the|your) cover letter|"
    r"write a cover letter|do not include)\b[^\n]*",
    re.IGNORECASE | re.MULTILINE,
)
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
_PHONE = re.compile(r"(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b")
_BULLET = re.compile(r"^\s*[-*•]\s")
_SECTION_HEADER = re.compile(
    r"^\s*(?:experience|work experience|education|skills|technical skills|projects|summary|"
    r"certifications|contact)\s*:?\s*$",
    re.IGNORECASE,
)
_ALL_CAPS_HEADER = re.compile(r"^\s*[A-Z][A-Z &/]{2,40}:?\s*$")
_BLANK_RUN = re.compile(r"\n{3,}")
_WORD = re.compile(r"[A-Za-z]{2,}")

# Contact lines carry little besides the address: "Jane Doe | Email: jane@x.io"
MAX_CONTACT_LINE_WORDS = 6


def build_cover_letter_prompt(job_text: str, resume_text: str, company: str | None = None) -> str:
    target = f" at {company}" if company else ""
    return f"""Write a cover letter for the role{target} described below, based only on facts from the resume.

Job Description:
{job_text}

Resume:
{resume_text}

Return the letter body only."""


def _cut_leaks(text: str) -> str:
    """Remove each leaked instruction marker up to the next salutation, or its line."""
    while True:
        marker = _LEAK_MARKER.search(text)
        if marker is None:
            return text
        salutation = _SALUTATION.search(text, marker.end())
        if salutation is not None:
            text = text[: marker.start()] + text[salutation.start():]
        else:
            text = text[: marker.start()] + text[marker.end():]


def _slice_after_salutation(text: str) -> str:
    first = _SALUTATION.search(text)
    if first is None:
        return text
    body = text[first.end():]
    second = _SALUTATION.search(body)
    if second is not None:
        body = body[: second.start()]
    return body


def _cut_closing(text: str) -> str:
    closing = _CLOSING.search(text)
    return text[: closing.start()] if closing else text


def _is_contact_line(line: str) -> bool:
    """A line that is mostly an email address or phone number, not prose mentioning one."""
    if not (_EMAIL.search(line) or _PHONE.search(line)):
        return False
    rest = _PHONE.sub(" ", _EMAIL.sub(" ", line))
    return len(_WORD.findall(rest)) <= MAX_CONTACT_LINE_WORDS


def _is_resume_fragment(line: str) -> bool:
    if _is_contact_line(line) or _BULLET.match(line):
        return True
    return bool(_SECTION_HEADER.match(line) or _ALL_CAPS_HEADER.match(line))


def _drop_resume_fragments(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if not _is_resume_fragment(line))


def _normalize(text: str) -> str:
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return _BLANK_RUN.sub("\n\n", text).strip()


def _clean_once(text: str) -> str:
    text = strip_code_fences(text.replace("\r\n", "\n"))
    text = _cut_leaks(text)
    text = _slice_after_salutation(text)
    text = _cut_closing(text)
    text = _drop_resume_fragments(text)
    return _normalize(text)


def clean_cover_letter(raw_text: str, min_length: int = MIN_LETTER_LENGTH) -> str:
    """Reduce raw model output to the letter body.

    Returns FALLBACK_LETTER when the cleaned body is shorter than ``min_length``.
    """
    text = raw_text or ""
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            break
        text = cleaned
    if len(text) < min_length:
        return FALLBACK_LETTER
    return text
