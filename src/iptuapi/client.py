"""Python client for the IPTU API."""

from __future__ import annotations

import dataclasses
import threading
from typing import Any, List, Optional, Union
from urllib.parse import quote

import httpx

from .config import ClientConfig
from .context import CallContext
from .executor import RequestExecutor
from .models import (
    CalendarioIPTU,
    Cidade,
    CidadesResponse,
    Comparable,
    ConsultaEnderecoResult,
    ConsultaIPTUResult,
    EvaluateParams,
    IsencaoResult,
    PropertyEvaluation,
    SimuladorParams,
    SimuladorResult,
    ValuationParams,
    ValuationResult,
)
from .ratelimit import RateLimitSnapshot

CidadeLike = Union[Cidade, str]

DEFAULT_ANO = 2025
DEFAULT_LIMIT = 20


def _cidade(value: CidadeLike) -> str:
    return value.value if isinstance(value, Cidade) else str(value)


class IPTUClient:
    """Client for the IPTU API.

    Example::

        with IPTUClient(ClientConfig(api_key="sua_api_key")) as client:
            resultado = client.consulta_endereco("Avenida Paulista", "1000")
            print(resultado.valor_venal_total, client.rate_limit)
    """

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config_lock = threading.Lock()
        self._executor = RequestExecutor(config, transport=transport)

    @classmethod
    def from_env(cls, *, transport: Optional[httpx.BaseTransport] = None, **overrides: Any) -> "IPTUClient":
        return cls(ClientConfig.from_env(**overrides), transport=transport)

    def __enter__(self) -> "IPTUClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._executor.config

    def configure(self, **changes: Any) -> ClientConfig:
        """Replace the configuration with a copy that has ``changes`` applied.

        Calls already in flight keep the configuration they started with.
        """
        with self._config_lock:
            updated = dataclasses.replace(self._executor.config, **changes)
            self._executor.config = updated
        return updated

    @property
    def rate_limit(self) -> Optional[RateLimitSnapshot]:
        return self._executor.state.snapshot

    @property
    def last_request_id(self) -> Optional[str]:
        return self._executor.state.last_request_id

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        body: Any = None,
        target: Any = None,
        ctx: Optional[CallContext] = None,
    ) -> Any:
        """Call an arbitrary endpoint through the retrying pipeline."""
        return self._executor.execute(method, path, params=params, body=body, target=target, ctx=ctx)

    # Property lookup

    def consulta_endereco(
        self,
        logradouro: str,
        numero: Optional[str] = None,
        cidade: CidadeLike = Cidade.SAO_PAULO,
        *,
        incluir_historico: bool = False,
        incluir_comparaveis: bool = False,
        incluir_zoneamento: bool = False,
        ctx: Optional[CallContext] = None,
    ) -> ConsultaEnderecoResult:
        params = {
            "logradouro": logradouro,
            "numero": numero or None,
            "cidade": _cidade(cidade),
            "incluir_historico": incluir_historico or None,
            "incluir_comparaveis": incluir_comparaveis or None,
            "incluir_zoneamento": incluir_zoneamento or None,
        }
        return self.request("GET", "/consulta/endereco", params=params, target=ConsultaEnderecoResult, ctx=ctx)

    def consulta_sql(
        self,
        sql: str,
        cidade: CidadeLike = Cidade.SAO_PAULO,
        *,
        incluir_historico: bool = False,
        incluir_comparaveis: bool = False,
        ctx: Optional[CallContext] = None,
    ) -> ConsultaEnderecoResult:
        """Look up a property by SQL number. Requires the Starter plan or higher."""
        params = {
            "sql": sql,
            "cidade": _cidade(cidade),
            "incluir_historico": incluir_historico or None,
            "incluir_comparaveis": incluir_comparaveis or None,
        }
        return self.request("GET", "/consulta/sql", params=params, target=ConsultaEnderecoResult, ctx=ctx)

    def consulta_iptu(
        self,
        cidade: CidadeLike,
        logradouro: str,
        *,
        numero: Optional[int] = None,
        ano: Optional[int] = None,
        limit: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> List[ConsultaIPTUResult]:
        """Search the IPTU dataset of any supported city by street name."""
        params = {
            "logradouro": logradouro,
            "numero": numero,
            "ano": ano if ano and ano > 0 else DEFAULT_ANO,
            "limit": limit if limit and limit > 0 else DEFAULT_LIMIT,
        }
        path = f"/dados/iptu/{_cidade(cidade)}/endereco"
        return self.request("GET", path, params=params, target=List[ConsultaIPTUResult], ctx=ctx)

    def consulta_iptu_sql(
        self,
        cidade: CidadeLike,
        identificador: str,
        *,
        ano: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> List[ConsultaIPTUResult]:
        """Search the IPTU dataset by property identifier.

        São Paulo uses the SQL number, Belo Horizonte the Índice Cadastral and
        Recife the Contribuinte number.
        """
        path = f"/dados/iptu/{_cidade(cidade)}/sql/{quote(identificador, safe='')}"
        return self.request("GET", path, params={"ano": ano}, target=List[ConsultaIPTUResult], ctx=ctx)

    # Valuation

    def valuation_estimate(self, params: ValuationParams, *, ctx: Optional[CallContext] = None) -> ValuationResult:
        """Estimate the market value of a property. Requires the Pro plan or higher."""
        return self.request("POST", "/valuation/estimate", body=params, target=ValuationResult, ctx=ctx)

    def valuation_evaluate(self, params: EvaluateParams, *, ctx: Optional[CallContext] = None) -> PropertyEvaluation:
        """Evaluate a property by address or SQL number.

        Combines the AVM model estimate with real ITBI transactions. Requires
        the Pro plan or higher.
        """
        return self.request("POST", "/valuation/evaluate", body=params, target=PropertyEvaluation, ctx=ctx)

    def valuation_comparables(
        self,
        bairro: str,
        area_min: float,
        area_max: float,
        cidade: CidadeLike = Cidade.SAO_PAULO,
        limit: int = 10,
        *,
        ctx: Optional[CallContext] = None,
    ) -> List[Comparable]:
        params = {
            "bairro": bairro,
            "area_min": area_min,
            "area_max": area_max,
            "cidade": _cidade(cidade),
            "limit": limit,
        }
        return self.request("GET", "/valuation/comparables", params=params, target=List[Comparable], ctx=ctx)

    # IPTU tools

    def iptu_tools_cidades(self, *, ctx: Optional[CallContext] = None) -> CidadesResponse:
        return self.request("GET", "/iptu-tools/cidades", target=CidadesResponse, ctx=ctx)

    def iptu_tools_calendario(
        self, cidade: CidadeLike = Cidade.SAO_PAULO, *, ctx: Optional[CallContext] = None
    ) -> CalendarioIPTU:
        params = {"cidade": _cidade(cidade)}
        return self.request("GET", "/iptu-tools/calendario", params=params, target=CalendarioIPTU, ctx=ctx)

    def iptu_tools_simulador(self, params: SimuladorParams, *, ctx: Optional[CallContext] = None) -> SimuladorResult:
        return self.request("POST", "/iptu-tools/simulador", body=params, target=SimuladorResult, ctx=ctx)

    def iptu_tools_isencao(
        self, valor_venal: float, cidade: CidadeLike = Cidade.SAO_PAULO, *, ctx: Optional[CallContext] = None
    ) -> IsencaoResult:
        params = {"valor_venal": valor_venal, "cidade": _cidade(cidade)}
        return self.request("GET", "/iptu-tools/isencao", params=params, target=IsencaoResult, ctx=ctx)

    def close(self) -> None:
        self._executor.close()


__all__ = ["IPTUClient"]
