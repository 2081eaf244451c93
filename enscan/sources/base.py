"""Common interface of the company-information sources and plug-ins."""

from __future__ import annotations

import abc
from typing import Any

from enscan.config import ENOptions, ENsD, EnsGo


class EnScanSource(abc.ABC):
    """A service that searches companies and lists their details.

    Rows are decoded JSON values, usually dictionaries.
    """

    def __init__(self, options: ENOptions) -> None:
        self.options = options

    @abc.abstractmethod
    def advance_filter(self) -> list[Any]:
        """Companies matching the keyword; raises LookupError when none match."""

    @abc.abstractmethod
    def get_en_map(self) -> dict[str, EnsGo]:
        """A fresh description of every kind of information the source offers."""

    @abc.abstractmethod
    def get_ens_d(self) -> ENsD:
        """The search this source is working on."""

    @abc.abstractmethod
    def get_company_base_info_by_id(self, pid: str) -> tuple[Any, dict[str, EnsGo]]:
        """Basic company data and the endpoint map with counts filled in."""

    @abc.abstractmethod
    def get_en_info_list(self, pid: str, en_map: EnsGo) -> list[Any]:
        """All rows of one kind of information for a company."""


class AppSource(abc.ABC):
    """A plug-in that looks up extra information from earlier results."""

    def __init__(self, options: ENOptions) -> None:
        self.options = options

    @abc.abstractmethod
    def get_info_list(self, keyword: str, kind: str) -> list[Any]:
        """Rows of ``kind`` found for ``keyword``."""

    @abc.abstractmethod
    def get_en_map(self) -> dict[str, EnsGo]:
        """A fresh description of every kind of information the plug-in offers."""