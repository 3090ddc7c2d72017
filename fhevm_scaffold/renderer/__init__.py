"""Template rendering for example and category documentation.

Quick usage::

    from fhevm_scaffold.renderer import DocumentRenderer

    renderer = DocumentRenderer()
    doc = renderer.render(descriptor, contract_text, test_text)
    await doc.write()
"""

from .documents import (
    DEFAULT_FILENAMES,
    CategoryMember,
    DocumentKind,
    DocumentRenderer,
    RenderedDocument,
    strip_generated_marker,
)
from .source import (
    code_language,
    extract_contract_name,
    extract_description,
    extract_function_signatures,
    fenced,
)
from .templates import TemplateRenderer

__all__ = [
    "DEFAULT_FILENAMES",
    "CategoryMember",
    "DocumentKind",
    "DocumentRenderer",
    "RenderedDocument",
    "TemplateRenderer",
    "code_language",
    "extract_contract_name",
    "extract_description",
    "extract_function_signatures",
    "fenced",
    "strip_generated_marker",
]
