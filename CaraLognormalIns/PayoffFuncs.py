'''
Ex post (loss-contingent) utility, spending, and payment under a nonlinear
deductible / coinsurance / out-of-pocket maximum contract when consumers have
quadratic moral hazard of magnitude H.
'''
import numpy as np

from .InsuranceContracts import isNullContract
from .InsuranceErrors import PayoffRegionError


def calcPayoffBounds(Contract,ThisType):
    '''
    Calculate the loss thresholds that separate the regions of the ex post
    payoff function: below the deductible (b1), start of the coinsurance region
    (b2), and end of the coinsurance region (b3).  Each is clipped at zero.

    Parameters
    ----------
    Contract : NonlinearContract
        The insurance contract.
    ThisType : CaraConsumerType
        The consumer type; only the moral hazard parameter H is used.

    Returns
    -------
    bounds : np.array
        Array of length 3 with the thresholds (b1,b2,b3).  b3 is inf when the
        coinsurance rate is zero and the out-of-pocket maximum exceeds the
        deductible, as the out-of-pocket maximum is then never reached.
    '''
    D = Contract.deductible
    c = Contract.coinsurance
    X = Contract.oopMax
    H = ThisType.H

    # (X - (1-c)*D)/c written as D + (X-D)/c, which needs no division when X == D
    if X == D:
        coins_span = 0.
    elif c == 0.:
        coins_span = np.inf
    else:
        coins_span = (X - D)/c

    b1 = max(min(D - (1.-c)*H/2., X - H/2.), 0.)
    b2 = max(D - (1.-c)*H/2., 0.)
    b3 = max(D + coins_span - (2.-c)*H/2., 0.)
    return np.array([b1,b2,b3])


def exPostPayoff(Contract,ThisType,losses,PublicInsMax):
    '''
    Evaluate ex post utility, total medical expenditure, and the consumer's
    payment when the consumer realizes a given loss.  Negative losses are
    treated as zero.

    Parameters
    ----------
    Contract : NonlinearContract
        The insurance contract.
    ThisType : CaraConsumerType
        The consumer type.
    losses : float or np.array
        Realized losses.
    PublicInsMax : float
        Public insurance maximum; identifies the null contract and caps payments under it.

    Returns
    -------
    u : float or np.array
        Ex post utility (money metric) at each loss.
    expenditure : float or np.array
        Total medical expenditure at each loss.
    payment : float or np.array
        Payment at each loss.
    bounds : np.array
        Region thresholds (b1,b2,b3), as returned by calcPayoffBounds.
    '''
    scalar_input = np.ndim(losses) == 0
    l = np.maximum(np.atleast_1d(np.asarray(losses,dtype=float)),0.)
    bounds = calcPayoffBounds(Contract,ThisType)
    b1, b2, b3 = bounds
    D = Contract.deductible
    c = Contract.coinsurance
    X = Contract.oopMax
    H = ThisType.H

    if isNullContract(Contract,PublicInsMax):
        u = np.maximum(-l,-PublicInsMax)
        payment = np.minimum(l,PublicInsMax)
        expenditure = l.copy()
    else:
        below = l < b1
        coins = np.logical_and(np.logical_not(below),np.logical_and(l >= b2, l <= b3))
        above = np.logical_not(np.logical_or(below,coins))
        if np.any(np.logical_and(above, l < b3)):
            raise PayoffRegionError('Loss falls outside every payoff region for contract ' + Contract.name
                                    + ' with thresholds ' + str(bounds))

        u = np.empty_like(l)
        expenditure = np.empty_like(l)
        payment = np.empty_like(l)

        # Below the deductible: no moral hazard response
        u[below] = -l[below]
        expenditure[below] = l[below]
        payment[below] = l[below]

        # Coinsurance region
        u[coins] = (1.-c)**2*H/2. - (1.-c)*D - c*l[coins]
        expenditure[coins] = (1.-c)*H + l[coins]
        payment[coins] = D + (1.-c)*(expenditure[coins] - D)

        # Above the out-of-pocket maximum
        u[above] = H/2. - X
        expenditure[above] = H + l[above]
        payment[above] = X

    if scalar_input:
        return u[0], expenditure[0], payment[0], bounds
    return u, expenditure, payment, bounds


def exPostCost(Contract,ThisType,losses,PublicInsMax):
    '''
    Evaluate the insurer's net cost, expenditure minus payment, at given losses.
    The null contract costs nothing, and its bounds are reported as zero.

    Parameters
    ----------
    Contract : NonlinearContract
        The insurance contract.
    ThisType : CaraConsumerType
        The consumer type.
    losses : float or np.array
        Realized losses.
    PublicInsMax : float
        Public insurance maximum.

    Returns
    -------
    cost : float or np.array
        Insurer cost at each loss.
    bounds : np.array or float
        Region thresholds (b1,b2,b3), or 0 for the null contract.
    '''
    if isNullContract(Contract,PublicInsMax):
        if np.ndim(losses) == 0:
            return 0., 0.
        return np.zeros(np.shape(losses)), 0.
    u, expenditure, payment, bounds = exPostPayoff(Contract,ThisType,losses,PublicInsMax)
    return expenditure - payment, bounds

