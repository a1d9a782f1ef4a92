"""Pydantic models for IPTU API requests and responses."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Cidade(str, Enum):
    SAO_PAULO = "sp"
    BELO_HORIZONTE = "bh"
    RECIFE = "recife"
    PORTO_ALEGRE = "poa"
    FORTALEZA = "fortaleza"
    CURITIBA = "curitiba"
    RIO_DE_JANEIRO = "rj"
    BRASILIA = "brasilia"


class APIModel(BaseModel):
    model_config = ConfigDict(extra="allow")


# Property lookup


class HistoricoItem(APIModel):
    ano: int
    valor_venal_terreno: Optional[float] = None
    valor_venal_construcao: Optional[float] = None
    valor_venal_total: Optional[float] = None
    iptu_valor: Optional[float] = None


class Zoneamento(APIModel):
    zona: str
    zona_descricao: Optional[str] = None
    coeficiente_aproveitamento_basico: Optional[float] = None
    coeficiente_aproveitamento_maximo: Optional[float] = None
    taxa_ocupacao_maxima: Optional[float] = None
    gabarito_maximo: Optional[float] = None


class ConsultaEnderecoResult(APIModel):
    sql: str
    logradouro: str
    numero: Optional[Union[int, str]] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cep: Optional[str] = None
    area_terreno: Optional[float] = None
    area_construida: Optional[float] = None
    valor_venal_terreno: Optional[float] = None
    valor_venal_construcao: Optional[float] = None
    valor_venal_total: Optional[float] = None
    iptu_valor: Optional[float] = None
    ano_construcao: Optional[int] = None
    tipo_uso: Optional[str] = None
    zona: Optional[str] = None
    historico: List[HistoricoItem] = Field(default_factory=list)
    comparaveis: List[Dict[str, Any]] = Field(default_factory=list)
    zoneamento: Optional[Zoneamento] = None


class ConsultaIPTUResult(APIModel):
    """One row of the multi-city IPTU dataset.

    Columns vary by city: Recife returns coordinates, estimated property value
    and the IPTU amount, other cities leave those fields out.
    """

    sql: str
    ano: int
    logradouro: str
    numero: Optional[Union[int, str]] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cep: Optional[str] = None
    area_terreno: Optional[float] = None
    area_construida: Optional[float] = None
    valor_terreno: Optional[float] = None
    valor_construcao: Optional[float] = None
    valor_venal: float
    valor_imovel: Optional[float] = None
    valor_iptu: Optional[float] = None
    finalidade: Optional[str] = None
    tipo_construcao: Optional[str] = None
    ano_construcao: Optional[int] = None
    pavimentos: Optional[int] = None
    fracao_ideal: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    cidade: str
    fonte: Optional[str] = None


# Valuation


class ValuationParams(APIModel):
    area_terreno: float = Field(..., gt=0)
    area_construida: float = Field(..., gt=0)
    bairro: str = Field(..., min_length=1)
    zona: str = Field(..., min_length=1)
    tipo_uso: str = Field(..., min_length=1)
    tipo_padrao: str = Field(..., min_length=1)
    ano_construcao: Optional[int] = None
    cidade: Cidade = Cidade.SAO_PAULO


class ValuationResult(APIModel):
    valor_estimado: float
    valor_minimo: float
    valor_maximo: float
    valor_m2: Optional[float] = None
    confianca: float
    metodo: Optional[str] = None
    comparaveis_utilizados: Optional[int] = None
    modelo_versao: Optional[str] = None


class EvaluateParams(APIModel):
    sql: Optional[str] = None
    logradouro: Optional[str] = None
    numero: Optional[int] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Cidade = Cidade.SAO_PAULO
    incluir_itbi: bool = True
    incluir_comparaveis: bool = True


class AVMEstimate(APIModel):
    valor_estimado: float
    valor_minimo: float
    valor_maximo: float
    valor_m2: Optional[float] = None
    confianca: float
    modelo_versao: Optional[str] = None


class ITBIMarketEstimate(APIModel):
    valor_estimado: float
    faixa_minima: float
    faixa_maxima: float
    valor_m2_mediana: Optional[float] = None
    total_transacoes: int
    periodo: Optional[str] = None
    fonte: Optional[str] = None


class FinalValuation(APIModel):
    estimado: float
    minimo: float
    maximo: float
    metodo: str
    peso_avm: float
    peso_itbi: float
    confianca: float
    nota: Optional[str] = None


class PropertyEvaluationMetadata(APIModel):
    processado_em: str
    fontes: List[str] = Field(default_factory=list)
    cidade: str


class PropertyEvaluation(APIModel):
    success: bool
    imovel: Dict[str, Any] = Field(default_factory=dict)
    avaliacao_avm: Optional[AVMEstimate] = None
    avaliacao_itbi: Optional[ITBIMarketEstimate] = None
    valor_final: FinalValuation
    comparaveis: Optional[Dict[str, Any]] = None
    metadata: PropertyEvaluationMetadata


class Comparable(APIModel):
    sql: Optional[str] = None
    logradouro: str
    numero: Optional[Union[int, str]] = None
    bairro: Optional[str] = None
    area_terreno: Optional[float] = None
    area_construida: Optional[float] = None
    valor_venal_total: Optional[float] = None
    distancia_metros: Optional[float] = None


# IPTU tools


class CidadeInfo(APIModel):
    codigo: str
    nome: str
    desconto_vista: Optional[str] = None
    parcelas_max: Optional[int] = None


class CidadesResponse(APIModel):
    cidades: List[CidadeInfo] = Field(default_factory=list)
    total: Optional[int] = None


class Vencimento(APIModel):
    parcela: int
    data: str
    descricao: Optional[str] = None


class CalendarioIPTU(APIModel):
    cidade: str
    ano: int
    desconto_vista_percentual: float
    parcelas_max: int
    vencimentos: List[Vencimento] = Field(default_factory=list)
    proximo_vencimento: Optional[str] = None
    dias_para_proximo_vencimento: Optional[int] = None
    alertas: List[str] = Field(default_factory=list)


class SimuladorParams(APIModel):
    valor_iptu: float = Field(..., gt=0)
    cidade: Cidade = Cidade.SAO_PAULO
    valor_venal: Optional[float] = None


class SimuladorResult(APIModel):
    valor_iptu: Optional[float] = None
    valor_vista: float
    economia_vista: float
    parcelas: int
    valor_parcela: float
    valor_total_parcelado: float
    recomendacao: str


class IsencaoResult(APIModel):
    valor_venal: float
    limite_isencao: float
    elegivel_isencao_total: bool
    elegivel_desconto_parcial: Optional[bool] = None
    mensagem: str


__all__ = [
    "AVMEstimate",
    "CalendarioIPTU",
    "Cidade",
    "CidadeInfo",
    "CidadesResponse",
    "Comparable",
    "ConsultaEnderecoResult",
    "ConsultaIPTUResult",
    "EvaluateParams",
    "FinalValuation",
    "HistoricoItem",
    "ITBIMarketEstimate",
    "IsencaoResult",
    "PropertyEvaluation",
    "PropertyEvaluationMetadata",
    "SimuladorParams",
    "SimuladorResult",
    "ValuationParams",
    "ValuationResult",
    "Vencimento",
    "Zoneamento",
]
