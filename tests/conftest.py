"""Shared test fixtures for postmeta-mcp tests."""

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's POSTMETA_* settings out of the tests."""
    for name in (
        "POSTMETA_INDEX_PATH",
        "POSTMETA_WORDS_PER_MINUTE",
        "POSTMETA_LOCAL_ONLY",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def storage_dir(tmp_path):
    """Provide a temporary storage directory for indexes."""
    d = tmp_path / "storage"
    d.mkdir()
    return str(d)


@pytest.fixture
def sample_markdown():
    """Return sample markdown content with multiple heading levels."""
    return """# Getting Started with Astro

Astro is a **modern** static site builder. Read the [official docs](https://docs.astro.build).

## Installation

Install with npm:

```bash
npm create astro@latest
# this comment looks like a heading
```

## Project Structure

### Pages

Files in `src/pages` become routes.

### Content Collections

> Collections keep your content type-safe.

![Diagram](./diagram.png)

## Next Steps
"""


@pytest.fixture
def sample_mdx():
    """Return sample MDX content with front matter."""
    return """---
title: "CSS Grid: The Complete Guide"
description: Everything about grid layouts
pubDate: 2024-03-15
tags: [css, layout]
---

import Callout from '../../components/Callout.astro'

# Grid Basics

<Callout type="info">
Grid works in two dimensions.
</Callout>

## Template Areas

<Demo src="areas" />

Name your areas and place items by name.
"""


@pytest.fixture
def sample_site(tmp_path):
    """Create an Astro-style site with blog and projects collections."""
    site = tmp_path / "my-blog"
    content = site / "src" / "content"
    blog = content / "blog"
    projects = content / "projects"
    blog.mkdir(parents=True)
    projects.mkdir(parents=True)

    (blog / "getting-started-with-astro.mdx").write_text(
        "---\ntitle: Getting Started with Astro\npubDate: 2024-01-10\ntags: [astro]\n---\n\n"
        "# Intro\n\nAstro ships zero JavaScript by default.\n\n## Setup\n\nRun the installer.\n"
    )
    (blog / "react-hooks-explained.md").write_text(
        "---\ntitle: React Hooks Explained\npubDate: 2024-02-20\ntags: [react, javascript]\n---\n\n"
        "## useState\n\nState in function components.\n\n### Lazy init\n\nPass a function.\n\n## useEffect\n\nSide effects.\n"
    )
    (blog / "unfinished.md").write_text(
        "---\ntitle: Work in progress\ndraft: true\n---\n\n# Soon\n"
    )
    (blog / "_template.md").write_text("# Template\n")
    (projects / "portfolio-website.mdx").write_text(
        "---\ntitle: Portfolio Website\ntags: [astro]\n---\n\nimport Gallery from '../Gallery.astro'\n\n"
        "## Features\n\n<Gallery />\n\nDark mode and RSS.\n"
    )
    (content / "config.ts").write_text("export const collections = {};\n")
    (content / "README.md").write_text("# Not an entry\n")

    (site / ".gitignore").write_text("src/content/blog/private/\n")
    private = blog / "private"
    private.mkdir()
    (private / "secret-post.md").write_text("# Secret\n")

    return site
