"""Job-board denylist and posting-likeness heuristics shared by search and ranking."""

from __future__ import annotations

import re
from urllib.parse import urlparse

# Brand names compared against every host label except the TLD, so regional
# variants (indeed.com, indeed.ca, uk.indeed.com, dice.co.uk) are all caught.
JOB_BOARD_BRANDS: frozenset[str] = frozenset({
    # General job boards
    "indeed",
    "glassdoor",
    "monster",
    "ziprecruiter",
    "simplyhired",
    "careerbuilder",
    "snagajob",
    # Tech-specific and specialized boards
    "dice",
    "builtin",
    "builtinsf",
    "builtinvancouver",
    "crunchboard",
    "hired",
    "authenticjobs",
    "triplebyte",
    "jobright",
    "devjobsscanner",
    # Startup and remote-focused boards
    "wellfound",
    "weworkremotely",
    "flexjobs",
    "remotive",
    "remoteok",
})

# Boards whose name is a generic word: only the exact domain (and its
# subdomains) is denied, so remote.com or arc.net stay allowed.
JOB_BOARD_DOMAINS: tuple[str, ...] = (
    "arc.dev",
    "angel.co",
    "remote.co",
    "relocate.me",
    "golang.cafe",
    "news.ycombinator.com",
)

# Boards hosted under a path of a general-purpose site.
JOB_BOARD_PATHS: tuple[str, ...] = (
    "linkedin.com/jobs",
    "stackoverflow.com/jobs",
    "python.org/jobs",
    "reddit.com/r/python",
    "reddit.com/r/golang",
    "reddit.com/r/forhire",
    "reddit.com/r/jobbit",
)

SEARCH_PAGE_URL = re.compile(
    r"/jobs\?|jobsearch|job-listing|jobs/search|jobs/collection|/q-|/jobs/?$",
    re.IGNORECASE,
)

SEARCH_PAGE_TITLES: tuple[str, ...] = (
    "jobs, employment",
    "job search",
    "find jobs",
    "browse jobs",
    "job listings",
    "all jobs",
    "search results",
)

ARTICLE_KEYWORDS: tuple[str, ...] = (
    "complete guide",
    "guide to",
    "how to",
    "everything you need",
    "what is",
    "article",
    "blog post",
    "/post/",
    "/blog/",
)

POSTING_INDICATORS: tuple[str, ...] = (
    "apply now",
    "apply today",
    "apply for this",
    "hiring",
    "we're hiring",
    "we are hiring",
    "position available",
    "job opening",
    "open position",
    "role:",
    "responsibilities:",
    "requirements:",
    "qualifications:",
    "salary range",
    "compensation",
    "benefits package",
    "full-time",
    "part-time",
    "remote",
    "job description",
    "we are looking for",
    "join our team",
    "submit your application",
    "send your resume",
    "years of experience",
    "required skills",
)

POSTING_URL_PATTERNS: tuple[str, ...] = (
    "/jobs/view/",
    "/job/",
    "/jobs/",
    "/careers/",
    "/career/",
    "/position/",
    "/opening/",
    "/apply",
    "job-id=",
    "jobid=",
)

CONTENT_SCAN_CHARS = 1000


def _host(url: str) -> str:
    parsed = urlparse(url if "//" in url else f"//{url}")
    return (parsed.hostname or "").rstrip(".")


def is_job_board(url: str) -> bool:
    lowered = (url or "").strip().lower()
    if not lowered:
        return False
    host = _host(lowered)
    if host:
        if any(label in JOB_BOARD_BRANDS for label in host.split(".")[:-1]):
            return True
        if any(host == d or host.endswith(f".{d}") for d in JOB_BOARD_DOMAINS):
            return True
    return any(fragment in lowered for fragment in JOB_BOARD_PATHS)


def looks_like_search_page(url: str, title: str) -> bool:
    if SEARCH_PAGE_URL.search(url or ""):
        return True
    lowered = (title or "").lower()
    return any(pattern in lowered for pattern in SEARCH_PAGE_TITLES)


def looks_like_article(url: str, title: str, content: str) -> bool:
    haystacks = (
        (title or "").lower(),
        (url or "").lower(),
        (content or "").lower()[:CONTENT_SCAN_CHARS],
    )
    return any(keyword in h for keyword in ARTICLE_KEYWORDS for h in haystacks)


def has_posting_signal(url: str, title: str, content: str) -> bool:
    lowered_title = (title or "").lower()
    lowered_content = (content or "").lower()[:CONTENT_SCAN_CHARS]
    if any(i in lowered_title or i in lowered_content for i in POSTING_INDICATORS):
        return True
    lowered_url = (url or "").lower()
    return any(pattern in lowered_url for pattern in POSTING_URL_PATTERNS)


def is_job_posting(url: str, title: str, content: str) -> bool:
    """Not a search page, not an article, and shows a posting indicator."""
    if looks_like_search_page(url, title) or looks_like_article(url, title, content):
        return False
    return has_posting_signal(url, title, content)
