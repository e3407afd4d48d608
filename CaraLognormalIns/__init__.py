from .InsuranceErrors import InsuranceModelError, InvalidContractError, DistributionIntegrationError, \
                             UtilityOrderingError, PayoffRegionError, TypeSolutionError
from .InsuranceContracts import NonlinearContract, makeNullContract, makeContractList, validateContract
from .TypeSampler import CaraConsumerType
from .CaraLognormalModel import HealthCaraLognormalModel
