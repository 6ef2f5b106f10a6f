#!/usr/bin/env python3
"""Security validation utilities for au-revoir-svn."""

import os
import re
from typing import List, Optional


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    MAX_REF_NAME_LENGTH = 255
    MAX_URL_LENGTH = 2048
    MAX_PATH_LENGTH = 4096
    MAX_FILENAME_LENGTH = 255

    SVN_URL_SCHEMES = ["http", "https", "svn", "svn+ssh", "file"]
    GIT_URL_SCHEMES = ["http", "https", "ssh", "git", "file"]

    # scp-like git syntax, e.g. git@github.com:org/repo.git
    SCP_URL_PATTERN = re.compile(r"^[A-Za-z0-9._-]+@[A-Za-z0-9.-]+:[^\s]+$")
    URL_SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")

    # Characters git refuses in ref names (see git-check-ref-format)
    FORBIDDEN_REF_CHARS = re.compile(r"[\s~^:?*\[\\]")

    @classmethod
    def _check_control_chars(cls, value: str, what: str) -> None:
        if "\x00" in value or any(ord(c) < 32 or ord(c) == 127 for c in value):
            raise ValueError(f"{what} contains null bytes or control characters")

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate URL for security."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        cls._check_control_chars(url, "URL")

        if url.startswith("-"):
            raise ValueError("URL must not start with '-'")

        match = cls.URL_SCHEME_PATTERN.match(url)
        if match:
            scheme = match.group(1).lower()
        elif cls.SCP_URL_PATTERN.match(url):
            scheme = "ssh"
        else:
            raise ValueError("URL must have a scheme (e.g. https://) or use git@host:path")

        if allowed_schemes and scheme not in allowed_schemes:
            raise ValueError(
                f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
            )

        return url

    @classmethod
    def validate_ref_name(cls, name: str) -> str:
        """Validate a branch or tag name before handing it to git."""
        if not name or not isinstance(name, str):
            raise ValueError("Ref name must be a non-empty string")

        if len(name) > cls.MAX_REF_NAME_LENGTH:
            raise ValueError(
                f"Ref name exceeds maximum length of {cls.MAX_REF_NAME_LENGTH}"
            )

        cls._check_control_chars(name, "Ref name")

        # A leading dash would be parsed as an option
        if name.startswith("-"):
            raise ValueError("Ref name must not start with '-'")

        if cls.FORBIDDEN_REF_CHARS.search(name):
            raise ValueError("Ref name contains characters git does not allow")

        if ".." in name or "@{" in name or "//" in name:
            raise ValueError("Ref name contains an invalid sequence")

        if name == "@" or name.startswith("/") or name.endswith(("/", ".", ".lock")):
            raise ValueError("Ref name has an invalid beginning or ending")

        if any(part.startswith(".") for part in name.split("/")):
            raise ValueError("Ref name components must not start with '.'")

        return name

    @classmethod
    def validate_filename(cls, filename: str) -> str:
        """Validate a bare file name (no directory part)."""
        if not filename or not isinstance(filename, str):
            raise ValueError("File name must be a non-empty string")

        if len(filename) > cls.MAX_FILENAME_LENGTH:
            raise ValueError(
                f"File name exceeds maximum length of {cls.MAX_FILENAME_LENGTH}"
            )

        cls._check_control_chars(filename, "File name")

        if "/" in filename or "\\" in filename or filename in (".", ".."):
            raise ValueError("File name must not contain path separators")

        return filename

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate file path for security."""
        if not path or not isinstance(path, str):
            raise ValueError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("File path contains null bytes")

        # Normalize path to prevent bypass attempts
        return os.path.normpath(path)

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        # Patterns to redact
        patterns = [
            (r"([a-z][a-z0-9+.-]*://)[^:/@\s]+:[^@\s]+@", r"\1[REDACTED]@"),  # URLs with credentials
            (r"\btoken=[^\s&]+", "token=[REDACTED]"),  # Token assignments
            (r"\bpassword=[^\s&]+", "password=[REDACTED]"),  # Password assignments
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),  # GitLab tokens
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
