"""Shared fixtures for core unit tests"""

import pytest

from mdreview.core.diff.differ import diff
from mdreview.core.diff.render import render
from mdreview.core.markdown.parse import parse_markdown
from mdreview.core.markup.document import DiffDocument
from mdreview.core.markup.preprocess import preprocess


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```

---

Footer paragraph.
"""


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_doc")
def sample_doc_fixture():
    return parse_markdown(SAMPLE_MD)


@pytest.fixture(name="markup_for")
def markup_for_fixture():
    """Return a function rendering the raw diff markup between two markdown texts."""
    def _markup_for(original: str, revised: str, granularity: str = "word") -> str:
        return render(diff(parse_markdown(original), parse_markdown(revised), granularity))
    return _markup_for


@pytest.fixture(name="resolve_all")
def resolve_all_fixture(markup_for):
    """Return a function that diffs two texts and accepts or rejects every node."""
    def _resolve_all(original: str, revised: str, accept: bool) -> str:
        document = DiffDocument.parse(preprocess(markup_for(original, revised)))
        if accept:
            document.accept_all()
        else:
            document.reject_all()
        return document.to_markup()
    return _resolve_all
