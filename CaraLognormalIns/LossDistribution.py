'''
Functions for the normal loss distribution of a consumer type: its density,
and the finite window outside of which that density is zero at machine precision.
'''
import numpy as np
from scipy.stats import norm
from scipy.integrate import quad

from .InsuranceErrors import DistributionIntegrationError


def lossDensity(ThisType,loss):
    '''
    Density of losses for a consumer type, Normal(M,S).  The density is not
    truncated at zero.

    Parameters
    ----------
    ThisType : CaraConsumerType
        Consumer type with normal loss parameters M and S.
    loss : float or np.array
        Loss levels at which to evaluate the density.

    Returns
    -------
    f : float or np.array
        Density at each loss level.
    '''
    return norm.pdf(loss,loc=ThisType.M,scale=ThisType.S)


def lossLogDensity(ThisType,loss):
    '''
    Log of lossDensity, computed directly rather than as log(pdf).
    '''
    return norm.logpdf(loss,loc=ThisType.M,scale=ThisType.S)


def densityIntegrand(loss,ThisType):
    return lossDensity(ThisType,loss)


def findCloserZero(ThisType,b,step_init,tol):
    '''
    Walk away from b in the direction of -step_init until the loss density is
    exactly zero.  Each time the walk crosses the boundary between positive and
    zero density, it reverses direction and shrinks the step by a factor of 10.
    Stops at a zero-density point once the step is no bigger than tol.

    Parameters
    ----------
    ThisType : CaraConsumerType
        Consumer type whose density is searched.
    b : float
        Starting point, where the density is positive.
    step_init : float
        Initial step; the walk goes toward b - step_init.
    tol : float
        Precision with which the boundary is located.

    Returns
    -------
    b : float
        Point just past the boundary, where the density is zero.
    '''
    f_b = 0.
    step = step_init
    while (abs(step) > tol) or (f_b > 0.):
        b = b - step
        f_b = lossDensity(ThisType,b)
        outward = np.sign(step) == np.sign(step_init)
        if f_b == 0.:
            if outward:
                step = -step/10.
        elif not outward:
            step = -step/10.
    return b


def integrationBounds(ThisType,tol,IntAbsTol=1e-15,IntRelTol=1e-12,IntLimit=200,CheckTol=1e-6):
    '''
    Find the smallest interval [lo,hi] outside of which the loss density of a
    type is zero at machine precision, then check that the density integrates
    to one over it.

    Parameters
    ----------
    ThisType : CaraConsumerType
        Consumer type with normal loss parameters M and S.
    tol : float
        Precision with which each bound is located.
    IntAbsTol : float
        Absolute tolerance for the integral check.
    IntRelTol : float
        Relative tolerance for the integral check.
    IntLimit : int
        Maximum number of subintervals used by the integrator.
    CheckTol : float
        Largest allowed difference between the integral and one.

    Returns
    -------
    lo : float
        Lower bound of the integration domain.
    hi : float
        Upper bound of the integration domain.
    '''
    lo = findCloserZero(ThisType,ThisType.M,1e6,tol)
    hi = findCloserZero(ThisType,ThisType.M,-1e6,tol)

    mass = quad(densityIntegrand,lo,hi,args=(ThisType,),epsabs=IntAbsTol,epsrel=IntRelTol,
                limit=IntLimit,points=[ThisType.M])[0]
    if abs(mass - 1.) > CheckTol:
        raise DistributionIntegrationError('Integral could not be well approximated, or this is not a distribution: '
                                           + 'mass on [' + str(lo) + ',' + str(hi) + '] is ' + str(mass))
    return lo, hi
