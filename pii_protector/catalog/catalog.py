"""CategoryCatalog: ordered allow-list of PII categories.

The catalog plays three roles:

- the default set of *requested* categories for a scan,
- the allow-list consulted by the normalizer and the validator,
- the presentation order used by the summary aggregator.

The correction table travels with the catalog so that every caller
normalises labels against the same table.  Display labels (singular and
plural nouns used in summaries) are optional; a category without one is
shown by its identifier.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from pii_protector.catalog.category import Category


def fold_label(label: str) -> str:
    """Upper-case *label* and collapse whitespace / hyphen runs to ``_``."""
    return "_".join(label.replace("-", " ").upper().split())


class CategoryCatalog:
    """Closed, ordered set of canonical categories plus label corrections."""

    def __init__(
        self,
        categories: Iterable[str],
        corrections: Mapping[str, str] | None = None,
        labels: Mapping[str, str | Sequence[str]] | None = None,
    ) -> None:
        ordered: dict[str, Category] = {}
        for name in categories:
            key = fold_label(str(name))
            if not key:
                raise ValueError("Category names must be non-empty")
            ordered.setdefault(key, Category(key))
        if not ordered:
            raise ValueError("A category catalog needs at least one category")
        self._categories = ordered
        self._positions = {name: i for i, name in enumerate(ordered)}

        self._corrections: dict[str, str] = {}
        for alias, target in (corrections or {}).items():
            target_key = fold_label(str(target))
            if target_key not in ordered:
                raise ValueError(
                    f"Correction {alias!r} -> {target!r} targets an unknown category"
                )
            self._corrections[fold_label(str(alias))] = target_key

        self._labels: dict[str, tuple[str, str]] = {}
        for name, label in (labels or {}).items():
            key = fold_label(str(name))
            if key not in ordered:
                raise ValueError(f"Label for {name!r} names an unknown category")
            if isinstance(label, str):
                self._labels[key] = (label, label)
            elif isinstance(label, (list, tuple)) and len(label) == 2 and all(
                isinstance(part, str) for part in label
            ):
                self._labels[key] = (label[0], label[1])
            else:
                raise ValueError(
                    f"Label for {name!r} must be a string or a [singular, plural] pair"
                )

    # -- container protocol -------------------------------------------------

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Category):
            return item.name in self._categories
        if isinstance(item, str):
            return item in self._categories
        return False

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def __repr__(self) -> str:
        return f"CategoryCatalog({self.names!r})"

    # -- lookups ------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        """Category identifiers in declared order."""
        return list(self._categories)

    @property
    def corrections(self) -> dict[str, str]:
        """Copy of the folded correction table (alias -> category name)."""
        return dict(self._corrections)

    def get(self, name: str) -> Category:
        """Return the category called *name* or raise ``KeyError``."""
        try:
            return self._categories[name]
        except KeyError:
            raise KeyError(f"Category not in catalog: {name!r}") from None

    def noun(self, category: Category, count: int) -> str:
        """Display noun for *count* spans of *category*."""
        singular, plural = self._labels.get(category.name, (category.name, category.name))
        return singular if count == 1 else plural

    def correct(self, folded_label: str) -> str:
        """Apply the correction table to an already folded label."""
        return self._corrections.get(folded_label, folded_label)

    def index(self, category: Category) -> int:
        """Declared position of *category*; ``KeyError`` if not a member."""
        try:
            return self._positions[category.name]
        except KeyError:
            raise KeyError(f"Category not in catalog: {category.name!r}") from None

    def select(self, names: Iterable[str]) -> frozenset[Category]:
        """Resolve caller-supplied category names to catalog members.

        Names go through the same folding and correction table as oracle
        labels, so ``"emails"`` selects ``EMAIL``.

        Raises
        ------
        KeyError
            If any name does not resolve to a catalog member.
        """
        selected: set[Category] = set()
        unknown: list[str] = []
        for name in names:
            key = self.correct(fold_label(str(name)))
            if key in self._categories:
                selected.add(self._categories[key])
            else:
                unknown.append(str(name))
        if unknown:
            raise KeyError(f"Categories not in catalog: {sorted(unknown)}")
        return frozenset(selected)

    def ordered(self, categories: Iterable[Category]) -> list[Category]:
        """Return *categories* sorted by declared catalog order."""
        return sorted(categories, key=self.index)

    @classmethod
    def default(cls) -> CategoryCatalog:
        """Return the catalog loaded from the configured ``CATEGORIES_PATH``."""
        from pii_protector.catalog.loader import load_catalog
        from pii_protector.core.settings import get_settings

        return load_catalog(get_settings().categories_path)
