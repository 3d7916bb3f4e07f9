"""nsxspec - declarative reconciliation of NSX manager objects from HCL specs."""

from .blueprints import Blueprint as Blueprint
from .client import ManagerClient as ManagerClient
from .client import ManagerSettings as ManagerSettings
from .context import Context as Context
from .errors import AmbiguousName as AmbiguousName
from .errors import ContractViolation as ContractViolation
from .errors import Deleted as Deleted
from .errors import NotFound as NotFound
from .errors import ReconcileError as ReconcileError
from .errors import StaleRevision as StaleRevision
from .errors import TransportError as TransportError
from .memory import InMemoryAccessor as InMemoryAccessor
from .memory import InMemoryClient as InMemoryClient
from .projects import ManagerProject as ManagerProject
from .projects import Project as Project
from .reconciler import Reconciler as Reconciler
from .resources import DhcpRelayProfileSpec as DhcpRelayProfileSpec
from .resources import SpoofGuardSwitchingProfileSpec as SpoofGuardSwitchingProfileSpec
from .resources import read_ns_group as read_ns_group
from .spec import Specification as Specification
from .spec import spec as spec
from .specop import Absent as Absent
from .specop import Ensure as Ensure
from .specop import Present as Present
from .specop import SpecOp as SpecOp
from .workspace import Workspace as Workspace
