# partners/models/__init__.py

from .partner import CommissionRule, Partner, PartnerWallet

__all__ = ["Partner", "CommissionRule", "PartnerWallet"]
