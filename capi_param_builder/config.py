"""
Configuration schemas using Pydantic

ParamBuilder 的建構設定: eTLD+1 策略與 click ID 來源。
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from capi_param_builder.models import FbcParamConfig, default_fbc_param_configs
from capi_param_builder.processing.domain_resolver import (
    DomainListStrategy,
    DomainStrategy,
    HeuristicStrategy,
    PublicSuffixResolver,
    ResolverStrategy,
)


class ParamBuilderConfig(BaseModel):
    """完整設定 schema"""
    # eTLD+1 策略 (use_public_suffix 優先於 domain_list)
    domain_list: List[str] = Field(default_factory=list, description="候選 eTLD+1 清單")
    use_public_suffix: bool = Field(default=False, description="使用 tldextract 解析 eTLD+1")
    tldextract_cache_dir: Optional[str] = Field(
        default=None,
        description="tldextract cache 目錄 (None 表示只用內建 snapshot)"
    )
    include_psl_private_domains: bool = Field(default=False, description="PSL private section")

    # Click ID 來源
    fbc_param_configs: List[FbcParamConfig] = Field(
        default_factory=default_fbc_param_configs,
        description="Click ID 來源 (依序)"
    )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "ParamBuilderConfig":
        """從 YAML 檔案載入設定"""
        import yaml
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))

    def build_strategy(self) -> DomainStrategy:
        """依設定建立 DomainStrategy"""
        if self.use_public_suffix:
            return ResolverStrategy(
                resolver=PublicSuffixResolver(
                    cache_dir=self.tldextract_cache_dir,
                    include_psl_private_domains=self.include_psl_private_domains,
                )
            )
        if self.domain_list:
            return DomainListStrategy(domains=self.domain_list)
        return HeuristicStrategy()
