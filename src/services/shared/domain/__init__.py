from .entity import AggregateRoot as AggregateRoot
from .entity import Entity as Entity
from .exception import (
    AlreadyInProgressException as AlreadyInProgressException,
)
from .exception import (
    BusinessRuleViolationException as BusinessRuleViolationException,
)
from .exception import (
    DomainException as DomainException,
)
from .exception import (
    DuplicateResourceException as DuplicateResourceException,
)
from .exception import (
    InvalidStateException as InvalidStateException,
)
from .exception import (
    OptimisticLockException as OptimisticLockException,
)
from .exception import (
    PackageUnavailableException as PackageUnavailableException,
)
from .exception import (
    PaymentAuthorizedButNotConfirmedException as PaymentAuthorizedButNotConfirmedException,
)
from .exception import (
    PaymentGatewayException as PaymentGatewayException,
)
from .exception import (
    ResourceNotFoundException as ResourceNotFoundException,
)
from .exception import (
    StoreUnavailableException as StoreUnavailableException,
)
from .exception import (
    ValidationException as ValidationException,
)
from .repository import Repository as Repository
from .value_object import (
    Currency as Currency,
)
from .value_object import (
    IsoDateTime as IsoDateTime,
)
from .value_object import (
    Money as Money,
)
from .value_object import (
    UserId as UserId,
)
