import re

EMAIL_RE = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.I)
PHONE_RE = re.compile(r"(?:\+?1[-.\s]?)?\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})")
URL_RE = re.compile(r"https?://[^\s,\"')<>]+", re.I)

URL_TRAILING_CHARS = ".,;:!?\"'`)]}>"

# Addresses that show up in page source but are not contacts
BLOCKED_EMAIL_DOMAINS = {
    "sentry.io",
    "ingest.sentry.io",
    "wixpress.com",
    "sentry.wixpress.com",
    "sentry-next.wixpress.com",
}

BLOCKED_EMAIL_DOMAIN_SUFFIXES = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".webp",
    ".pdf",
    ".zip",
)


def extract_emails(text: str | None) -> list[str]:
    if not text:
        return []
    out = []
    for m in EMAIL_RE.findall(text):
        e = m.strip().lower()
        if e and e not in out:
            out.append(e)
    return out


def format_phone(area: str, prefix: str, line: str) -> str:
    return f"({area}) {prefix}-{line}"


def extract_phone_numbers(text: str | None) -> list[str]:
    if not text:
        return []
    out = []
    for area, prefix, line in PHONE_RE.findall(text):
        phone = format_phone(area, prefix, line)
        if phone not in out:
            out.append(phone)
    return out


def extract_urls_from_text(text: str | None) -> list[str]:
    if not text:
        return []
    out = []
    for m in URL_RE.findall(text):
        u = m.strip().rstrip(URL_TRAILING_CHARS)
        if u:
            out.append(u)
    return out


def normalize_email(email: str) -> str:
    e = (email or "").strip().lower()
    if e.startswith("mailto:"):
        e = e[len("mailto:"):]
    return e.split("?", 1)[0].strip()


def is_candidate_email(email: str) -> bool:
    e = normalize_email(email)
    if "@" not in e:
        return False
    domain = e.split("@", 1)[1]
    if domain in BLOCKED_EMAIL_DOMAINS or domain.endswith(".sentry.io"):
        return False
    if any(domain.endswith(sfx) for sfx in BLOCKED_EMAIL_DOMAIN_SUFFIXES):
        return False
    return True
