'''
Exceptions raised by the CARA-lognormal insurance model.  Each of these is a
deterministic consistency failure: none of them should be caught and retried.
'''

class InsuranceModelError(Exception):
    '''
    Base class for all errors raised by the insurance model.
    '''
    pass


class InvalidContractError(InsuranceModelError, ValueError):
    '''
    A contract has a coinsurance rate outside [0,1], a deductible that is negative
    or above its out-of-pocket maximum, or an out-of-pocket maximum above the
    public insurance maximum.
    '''
    pass


class DistributionIntegrationError(InsuranceModelError, ArithmeticError):
    '''
    The loss density does not integrate to one over the truncated domain.
    '''
    pass


class UtilityOrderingError(InsuranceModelError, ArithmeticError):
    '''
    Utility without insurance came out higher than utility with insurance.
    '''
    pass


class PayoffRegionError(InsuranceModelError, ArithmeticError):
    '''
    A realized loss fell between the regions of the piecewise payoff function.
    '''
    pass


class TypeSolutionError(InsuranceModelError, ArithmeticError):
    '''
    The normal loss parameters found for a type do not reproduce its target moments.
    '''
    pass
