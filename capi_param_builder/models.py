"""
Core data models for capi-param-builder

定義 ParamBuilder 的輸入 (RequestContext)、輸出 (CookieSettings) 與中間結果。
"""

from enum import Enum
from typing import Optional, List, Dict, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from capi_param_builder.constants import FBCLID_STRING, CLICK_ID_STRING


class FbcParamConfig(BaseModel):
    """
    Click ID 來源設定

    每個來源在 query string (或 referer 的 query string) 出現時，
    會在 _fbc payload 加上一段。
    """
    model_config = ConfigDict(frozen=True)

    query: str = Field(..., description="Query parameter 名稱")
    prefix: str = Field(default="", description="payload segment 前綴")
    label: str = Field(default="", description="來源標籤")


def default_fbc_param_configs() -> List[FbcParamConfig]:
    """預設只有 fbclid 一個來源"""
    return [FbcParamConfig(query=FBCLID_STRING, prefix="", label=CLICK_ID_STRING)]


class CookieSettings(BaseModel):
    """
    Cookie 寫入指令 (每個 cookie 名稱一筆)

    呼叫端依此設定實際的 Set-Cookie header。
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "_fbc",
                "value": "fb.1.1700000000000.IwAR3xyz.AQMCAQEA",
                "max_age": 7776000,
                "domain": "example.com",
            }
        },
    )

    name: str = Field(..., description="_fbc 或 _fbp")
    value: str = Field(..., description="Token 字串")
    max_age: int = Field(..., description="存活秒數")
    domain: Optional[str] = Field(None, description="eTLD+1 或 bracketed IP")


class RequestContext(BaseModel):
    """
    正規化後的 request (framework adaptor 的輸出)

    core 只讀取這四個欄位，不檢查 framework 的 request 型別。
    """
    host: str = Field(default="", description="Host header")
    query_params: Dict[str, str] = Field(default_factory=dict, description="Query parameters")
    cookies: Dict[str, str] = Field(default_factory=dict, description="Request cookies")
    referer: Optional[str] = Field(None, description="Referer header")

    @field_validator("query_params", "cookies", mode="before")
    @classmethod
    def _drop_missing_values(cls, value):
        # adaptor 常給 None 值，視同不存在
        if not value:
            return {}
        return {k: v for k, v in value.items() if v is not None}


class AppendixState(str, Enum):
    """Token 第 5 段的分類"""
    ABSENT = "absent"
    LEGACY_TOKEN = "legacy_token"
    CURRENT_APPENDIX = "current_appendix"
    INVALID = "invalid"


class AppendixInfo(BaseModel):
    """Decoded appendix (6 bytes)"""
    format_version: int
    language_index: int
    change_type: int
    major: int
    minor: int
    patch: int

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class ParsedToken(BaseModel):
    """通過驗證的 token"""
    raw: str = Field(..., description="原始 cookie 值")
    tag: str
    sub_domain_index: int
    timestamp: int = Field(..., description="建立時間 (epoch ms)")
    payload: str
    appendix: Optional[str] = Field(None, description="第 5 段 (若存在)")
    appendix_state: AppendixState = AppendixState.ABSENT

    @property
    def needs_rewrite(self) -> bool:
        """4 段的舊版 token 必須補上 appendix"""
        return self.appendix_state == AppendixState.ABSENT


class InvalidToken(BaseModel):
    """驗證失敗的 token (視同不存在)"""
    raw: Optional[str] = None
    reason: str


TokenParseResult = Union[ParsedToken, InvalidToken]


class DomainResolution(BaseModel):
    """
    單一 host 的 eTLD+1 解析結果

    ParamBuilder 以此作為 cache，host 不變時不重新計算。
    """
    model_config = ConfigDict(frozen=True)

    host: Optional[str] = Field(None, description="原始 host 字串 (cache key)")
    etld_plus_1: Optional[str] = Field(None, description="Cookie domain")
    sub_domain_index: int = Field(default=0, description="etld_plus_1 的 label 數 - 1")


class ProcessResult(BaseModel):
    """單次 process 的結果"""
    cookies_to_set: List[CookieSettings] = Field(default_factory=list)
    fbc: Optional[str] = Field(None, description="目前的 click-id token")
    fbp: Optional[str] = Field(None, description="目前的 browser-id token")
    domain: Optional[DomainResolution] = None
