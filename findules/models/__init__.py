# findules/models/__init__.py

# 1. Declarative base
from findules.database import Base

# 2. Organization (branches and cashiers)
from .organization import Branch, Cashier, RecordStatus

# 3. Users and roles
from .users import User, Role

# 4. Branch cash ledger
from .balances import BranchBalance, BranchBalanceTransaction, BalanceTransactionType

# 5. Cashier reconciliations
from .reconciliations import Reconciliation, ReconciliationStatus, VarianceCategory

# 6. Imprest and fuel coupons
from .imprest import Imprest, ImprestStatus, ImprestCategory
from .fuel import FuelCoupon, FuelType

# 7. Audit trail and document numbering
from .audit import AuditLog
from .sequences import DocumentSequence
