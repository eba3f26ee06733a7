from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml


class I18n:
    """YAML-backed reply texts with fallback to English.

    ``zh-tw`` looks up ``messages.zh-tw.yaml``, then ``messages.zh.yaml``,
    then ``messages.en.yaml``. Paths are resolved relative to this file so
    the loader does not depend on the working directory.
    """

    def __init__(self, lang: str, base_dir: Path | None = None) -> None:
        self.lang = (lang or "en").lower()
        if base_dir is None:
            # libs/core/i18n.py -> project_root/config/i18n
            project_root = Path(__file__).resolve().parents[2]
            self.base_dir = project_root / "config" / "i18n"
        else:
            self.base_dir = Path(base_dir)
        self._layers: List[Dict[str, str]] = []
        self._load()

    def _candidates(self) -> List[str]:
        names = [self.lang]
        base = self.lang.split("-", 1)[0]
        if base != self.lang:
            names.append(base)
        if "en" not in names:
            names.append("en")
        return names

    def _load(self) -> None:
        def _read(path: Path) -> Dict[str, str]:
            if not path.exists():
                return {}
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
                if not isinstance(data, dict):
                    return {}
                return {str(k): str(v) for k, v in data.items()}

        self._layers = [_read(self.base_dir / f"messages.{name}.yaml") for name in self._candidates()]

    def t(self, key: str, **params: object) -> str:
        for layer in self._layers:
            if key in layer and layer[key]:
                template = layer[key]
                return template.format(**params) if params else template
        return key


__all__ = ["I18n"]
