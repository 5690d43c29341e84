# findules/routers/__init__.py

# Exposes the modules so "from findules.routers import imprest" works
from . import auth
from . import users
from . import branches
from . import cashiers
from . import branch_balance
from . import reconciliations
from . import imprest
from . import fuel_coupons
from . import exports
from . import audit_logs
from . import dashboard
from . import analytics
