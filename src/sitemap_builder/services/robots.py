"""robots.txt rendering."""

from __future__ import annotations

from sitemap_builder.schemas.robots import RobotsConfig, RobotsRule

DEFAULT_ROBOTS_BLOCK = "User-agent: *\nAllow: /"


def _build_rule_block(rule: RobotsRule) -> str:
    lines = [f"User-agent: {rule.user_agent}"]
    lines.extend(f"Allow: {path}" for path in rule.allow)
    lines.extend(f"Disallow: {path}" for path in rule.disallow)
    return "\n".join(lines)


def build_robots_txt(config: RobotsConfig | None = None) -> str:
    """Render a robots.txt body; output always ends with one newline."""

    resolved = config or RobotsConfig()
    parts: list[str] = []

    if resolved.rules:
        parts.append("\n\n".join(_build_rule_block(rule) for rule in resolved.rules))
    else:
        parts.append(DEFAULT_ROBOTS_BLOCK)

    if resolved.sitemap_url:
        parts.append(f"Sitemap: {resolved.sitemap_url}")

    parts.extend(f"Sitemap: {url}" for url in resolved.additional_sitemaps)

    if resolved.custom:
        parts.append(resolved.custom.rstrip("\n"))

    return "\n\n".join(parts) + "\n"


__all__ = ["DEFAULT_ROBOTS_BLOCK", "build_robots_txt"]
