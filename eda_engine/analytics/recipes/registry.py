from __future__ import annotations

import importlib
import pkgutil
from types import ModuleType
from typing import Dict, Iterable, List

from eda_engine.errors import InvalidParameterError

from ._base import RecipeMeta

_PACKAGE = __name__.rsplit(".", 1)[0]  # eda_engine.analytics.recipes


def iter_recipe_modules() -> Iterable[str]:
    pkg = importlib.import_module(_PACKAGE)
    for m in pkgutil.walk_packages(pkg.__path__, prefix=_PACKAGE + "."):
        name = m.name
        if m.ispkg or name.endswith("._base") or name.endswith(".registry"):
            continue
        yield name


def load_all_recipes() -> List[ModuleType]:
    modules: List[ModuleType] = []
    for modname in iter_recipe_modules():
        mod = importlib.import_module(modname)
        if getattr(mod, "META", None) is not None and callable(getattr(mod, "run", None)):
            modules.append(mod)
    modules.sort(key=lambda m: (m.META.order, m.META.slug))
    return modules


def load_all_meta() -> List[RecipeMeta]:
    return [m.META for m in load_all_recipes()]


def recipes_by_slug() -> Dict[str, ModuleType]:
    return {m.META.slug: m for m in load_all_recipes()}


def get_recipe(slug: str) -> ModuleType:
    recipes = recipes_by_slug()
    if slug not in recipes:
        raise InvalidParameterError(
            f"Unknown recipe '{slug}'",
            hints=[f"Available recipes: {', '.join(recipes)}"],
        )
    return recipes[slug]
