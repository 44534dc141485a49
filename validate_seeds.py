import socket
from urllib.parse import urlparse

import requests

import config
from seeds import build_seeds_from_input

OUT_OK = "seeds_working.txt"
OUT_BAD = "seeds_failed.txt"

TIMEOUT = 12


def can_resolve(host: str) -> bool:
    try:
        socket.getaddrinfo(host, 443)
        return True
    except OSError:
        return False


def status_result(status: int) -> tuple[bool, str]:
    if status < 400:
        return True, f"ok_{status}"
    return False, f"bad_status_{status}"


def head_status(url: str, headers: dict) -> int | None:
    """HEAD status, or None when the server refuses HEAD or the request fails."""
    try:
        r = requests.head(url, allow_redirects=True, timeout=TIMEOUT, headers=headers)
    except requests.exceptions.RequestException:
        return None
    if r.status_code in (403, 405):
        return None
    return r.status_code


def check_url(url: str) -> tuple[bool, str]:
    """Reachability of one seed as (ok, reason)."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return False, "bad_url"
    if not host:
        return False, "bad_url"
    if not can_resolve(host):
        return False, "dns_fail"

    headers = {"User-Agent": config.USER_AGENT}
    status = head_status(url, headers)
    if status is not None:
        return status_result(status)

    try:
        with requests.get(url, allow_redirects=True, timeout=TIMEOUT, headers=headers, stream=True) as r:
            return status_result(r.status_code)
    except requests.exceptions.Timeout:
        return False, "timeout"
    except requests.exceptions.RequestException as e:
        return False, f"error_{type(e).__name__}"


def main():
    seeds = build_seeds_from_input(config.load_input())

    ok = []
    bad = []
    for url in seeds:
        good, reason = check_url(url)
        if good:
            ok.append(url)
            print(f"OK   {url}")
        else:
            bad.append((url, reason))
            print(f"FAIL {url}  ({reason})")

    with open(OUT_OK, "w", encoding="utf-8") as f:
        f.write("\n".join(ok) + ("\n" if ok else ""))

    with open(OUT_BAD, "w", encoding="utf-8") as f:
        for url, reason in bad:
            f.write(f"{url}\t{reason}\n")

    print("\nSaved:")
    print(f"  working -> {OUT_OK}")
    print(f"  failed  -> {OUT_BAD}")


if __name__ == "__main__":
    main()
