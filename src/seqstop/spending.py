"""
Alpha spending functions.

Each strategy maps an information fraction ``t`` to the cumulative Type I
error allowed to be spent by that point. All strategies satisfy

* ``spend(t <= 0, alpha) == 0``
* ``spend(t >= 1, alpha) == alpha``
* non-decreasing in ``t`` and bounded by ``alpha``.

A strategy is chosen once from the test configuration and injected wherever
alpha is spent (boundary construction, interim bookkeeping, adjusted
p-values), so the three call sites cannot drift apart.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from seqstop.normal import cdf, quantile
from seqstop.schema import SpendingFunction, TestConfig

HAYBITTLE_PETO_INTERIM_RATE = 0.001


def obrien_fleming_spending(t: float, alpha: float) -> float:
    """O'Brien-Fleming-type spending: 2 * (1 - Phi(z_{alpha/2} / sqrt(t)))."""
    if t <= 0:
        return 0.0
    if t >= 1:
        return float(alpha)
    z_alpha = quantile(1 - alpha / 2.0)
    return 2.0 * (1.0 - cdf(z_alpha / math.sqrt(t)))


def pocock_spending(t: float, alpha: float) -> float:
    """Pocock-type spending: alpha * ln(1 + (e - 1) * t)."""
    if t <= 0:
        return 0.0
    if t >= 1:
        return float(alpha)
    return alpha * math.log(1.0 + (math.e - 1.0) * t)


def haybittle_peto_spending(t: float, alpha: float) -> float:
    """Tiny linear spend at interim looks, the full alpha at the final look.

    The interim rate is capped at alpha / 2 so interim looks never use up
    the whole budget when alpha is itself below 0.001.
    """
    if t <= 0:
        return 0.0
    if t >= 1:
        return float(alpha)
    return min(HAYBITTLE_PETO_INTERIM_RATE, alpha / 2.0) * t


def lan_demets_spending(t: float, alpha: float, rho: float = 1.0) -> float:
    """Generalized Lan-DeMets family.

    rho == 1 reproduces O'Brien-Fleming and rho == 0.5 reproduces Pocock;
    any other rho uses the power family alpha * t**rho.
    """
    if t <= 0:
        return 0.0
    if t >= 1:
        return float(alpha)
    if rho == 1:
        return obrien_fleming_spending(t, alpha)
    if rho == 0.5:
        return pocock_spending(t, alpha)
    return alpha * t ** rho


@dataclass(frozen=True)
class AlphaSpender:
    """Base strategy. Subclasses implement ``_raw``."""

    inflation_factor: float = 1.05

    @property
    def name(self) -> str:
        raise NotImplementedError

    def _raw(self, t: float, alpha: float) -> float:
        raise NotImplementedError

    def spend(self, t: float, alpha: float) -> float:
        return float(min(max(self._raw(float(t), float(alpha)), 0.0), alpha))

    def __call__(self, t: float, alpha: float) -> float:
        return self.spend(t, alpha)


@dataclass(frozen=True)
class OBrienFleming(AlphaSpender):
    inflation_factor: float = 1.015

    @property
    def name(self) -> str:
        return SpendingFunction.OBRIEN_FLEMING.value

    def _raw(self, t: float, alpha: float) -> float:
        return obrien_fleming_spending(t, alpha)


@dataclass(frozen=True)
class Pocock(AlphaSpender):
    inflation_factor: float = 1.18

    @property
    def name(self) -> str:
        return SpendingFunction.POCOCK.value

    def _raw(self, t: float, alpha: float) -> float:
        return pocock_spending(t, alpha)


@dataclass(frozen=True)
class HaybittlePeto(AlphaSpender):
    inflation_factor: float = 1.01

    @property
    def name(self) -> str:
        return SpendingFunction.HAYBITTLE_PETO.value

    def _raw(self, t: float, alpha: float) -> float:
        return haybittle_peto_spending(t, alpha)


@dataclass(frozen=True)
class LanDeMets(AlphaSpender):
    inflation_factor: float = 1.05
    rho: float = 1.0

    @property
    def name(self) -> str:
        return SpendingFunction.LAN_DEMETS.value

    def _raw(self, t: float, alpha: float) -> float:
        return lan_demets_spending(t, alpha, self.rho)


def get_spending_function(
    spending: Union[SpendingFunction, str, TestConfig],
    rho: float = 1.0,
) -> AlphaSpender:
    """Build the spending strategy for a SpendingFunction (or a whole TestConfig)."""
    if isinstance(spending, TestConfig):
        rho = spending.rho
        spending = spending.spending_function
    kind = SpendingFunction(spending)
    if kind == SpendingFunction.OBRIEN_FLEMING:
        return OBrienFleming()
    if kind == SpendingFunction.POCOCK:
        return Pocock()
    if kind == SpendingFunction.HAYBITTLE_PETO:
        return HaybittlePeto()
    return LanDeMets(rho=float(rho))
