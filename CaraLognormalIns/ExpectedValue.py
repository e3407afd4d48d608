'''
Functions that integrate ex post utility and cost over a type's loss
distribution to get willingness to pay for a contract (relative to the null
contract) and the insurer's expected cost of covering the type.

Losses below zero are treated as zero, so the loss distribution has a point
mass at zero (the density below zero) and a continuous part above it.  Risk
averse types are evaluated by their CARA certainty equivalent; the integrand
exp(-A*u + log f) is rescaled by exp(-K), where K is the largest value of the
exponent, so that it can be exponentiated without overflow.
'''
import warnings
import numpy as np
from scipy.integrate import quad
from scipy.optimize import minimize_scalar

from .InsuranceContracts import makeNullContract, isNullContract, validateContract
from .InsuranceErrors import UtilityOrderingError
from .LossDistribution import lossDensity, lossLogDensity, densityIntegrand, integrationBounds
from .PayoffFuncs import exPostPayoff, exPostCost


def riskNeutralIntegrand(loss,Contract,ThisType,PublicInsMax):
    return exPostPayoff(Contract,ThisType,loss,PublicInsMax)[0]*lossDensity(ThisType,loss)


def caraIntegrand(loss,Contract,ThisType,PublicInsMax,K):
    u = exPostPayoff(Contract,ThisType,loss,PublicInsMax)[0]
    return np.exp(-ThisType.A*u + lossLogDensity(ThisType,loss) - K)


def caraExponentNeg(loss,Contract,ThisType,PublicInsMax):
    u = exPostPayoff(Contract,ThisType,loss,PublicInsMax)[0]
    return -lossLogDensity(ThisType,loss) + ThisType.A*u


def costIntegrand(loss,Contract,ThisType,PublicInsMax):
    return exPostCost(Contract,ThisType,loss,PublicInsMax)[0]*lossDensity(ThisType,loss)


def findWaypoints(bounds,lo,hi):
    '''
    Return the finite payoff thresholds that lie strictly inside (lo,hi), or
    None if there are none, for use as integrator break points.
    '''
    bounds = np.atleast_1d(bounds)
    these = bounds[np.logical_and(np.isfinite(bounds),np.logical_and(bounds > lo,bounds < hi))]
    if these.size == 0:
        return None
    return np.unique(these)


def calcZeroLossMass(ThisType,lo,hi,quad_opts):
    '''
    Probability that the loss is zero, i.e. the density mass on [lo,min(hi,0)].
    '''
    if lo >= 0.:
        return 0.
    return quad(densityIntegrand,lo,min(hi,0.),args=(ThisType,),**quad_opts)[0]


def calcCaraNormalizer(Contract,ThisType,PublicInsMax,hi):
    '''
    Find K, the maximum over losses in [0,hi-1] of log f(l) - A*u(l), by bounded
    scalar minimization of its negative.

    Parameters
    ----------
    Contract : NonlinearContract
        The insurance contract.
    ThisType : CaraConsumerType
        The consumer type.
    PublicInsMax : float
        Public insurance maximum.
    hi : float
        Upper bound of the loss integration domain.

    Returns
    -------
    K : float
        Normalizing constant for the exponential utility integrand.
    '''
    upper = hi - 1.
    if upper <= 0.:
        return -caraExponentNeg(0.,Contract,ThisType,PublicInsMax)
    res = minimize_scalar(caraExponentNeg,bounds=(0.,upper),method='bounded',
                          args=(Contract,ThisType,PublicInsMax))
    return -res.fun


def expectedUtility(Contract,ThisType,PublicInsMax,BoundsTol=1e-2,IntAbsTol=1e-15,IntRelTol=1e-12,
                    IntLimit=200,DstnCheckTol=1e-6,OrderingTol=1e-6):
    '''
    Calculate a type's willingness to pay for a contract: the difference between
    its (certainty equivalent) expected utility with the contract and with the
    null contract.

    Parameters
    ----------
    Contract : NonlinearContract
        The insurance contract.
    ThisType : CaraConsumerType
        The consumer type.
    PublicInsMax : float
        Public insurance maximum.
    BoundsTol : float
        Precision of the integration bounds search.
    IntAbsTol : float
        Absolute tolerance of every integral.
    IntRelTol : float
        Relative tolerance of every integral.
    IntLimit : int
        Maximum number of subintervals per integral.
    DstnCheckTol : float
        Allowed deviation from one of the density mass over the bounds.
    OrderingTol : float
        Allowed relative excess of utility without insurance over utility with it.

    Returns
    -------
    wtp : float
        Willingness to pay for the contract; zero for the null contract.
    '''
    validateContract(Contract,PublicInsMax)
    if isNullContract(Contract,PublicInsMax):
        return 0.

    NullContract = makeNullContract(PublicInsMax)
    quad_opts = {'epsabs' : IntAbsTol, 'epsrel' : IntRelTol, 'limit' : IntLimit}
    uEx_0, _, _, bounds = exPostPayoff(Contract,ThisType,0.,PublicInsMax)
    lo, hi = integrationBounds(ThisType,BoundsTol,IntAbsTol,IntRelTol,IntLimit,DstnCheckTol)
    waypoints = findWaypoints(bounds,max(lo,0.),hi)
    p_0 = calcZeroLossMass(ThisType,lo,hi,quad_opts)
    A = ThisType.A

    # The null payoff kinks only at the public insurance maximum
    null_waypoints = findWaypoints(np.array([PublicInsMax]),max(lo,0.),hi)

    u = 0.  # With insurance
    u0 = 0. # With the null contract
    if A > 0.:
        K = calcCaraNormalizer(Contract,ThisType,PublicInsMax,hi)
        K0 = calcCaraNormalizer(NullContract,ThisType,PublicInsMax,hi)
        # The zero loss point mass can dominate the continuous part
        if p_0 > 0.:
            K = max(K,np.log(p_0) - A*uEx_0)
            K0 = max(K0,np.log(p_0))

        # Ex post utility under the null contract is zero when there is no loss
        u = p_0*np.exp(-A*uEx_0 - K)
        u0 = p_0*np.exp(-K0)
        if hi > 0.:
            u += quad(caraIntegrand,max(lo,0.),hi,args=(Contract,ThisType,PublicInsMax,K),
                      points=waypoints,**quad_opts)[0]
            u0 += quad(caraIntegrand,max(lo,0.),hi,args=(NullContract,ThisType,PublicInsMax,K0),
                       points=null_waypoints,**quad_opts)[0]
        u = -(np.log(u) + K)/A
        u0 = -(np.log(u0) + K0)/A

    else: # Risk neutral
        u = p_0*uEx_0
        if hi > 0.:
            u += quad(riskNeutralIntegrand,max(lo,0.),hi,args=(Contract,ThisType,PublicInsMax),
                      points=waypoints,**quad_opts)[0]
            u0 += quad(riskNeutralIntegrand,max(lo,0.),hi,args=(NullContract,ThisType,PublicInsMax),
                       points=null_waypoints,**quad_opts)[0]

    if u0 - u > OrderingTol*abs(u):
        raise UtilityOrderingError('Utility without insurance cannot be higher than with it: '
                                   + 'with insurance %.8f, without insurance %.8f' % (u,u0))

    wtp = u - u0
    wtp_max = PublicInsMax + ThisType.H/2.
    if wtp > wtp_max:
        warnings.warn('Impossible value %.8f, setting willingness to pay to publicInsuranceMaximum + H/2 = %.8f'
                      % (wtp,wtp_max),RuntimeWarning)
        wtp = wtp_max
    return float(wtp)


def expectedCost(Contract,ThisType,PublicInsMax,BoundsTol=1e-2,IntAbsTol=1e-15,IntRelTol=1e-12,
                 IntLimit=200,DstnCheckTol=1e-6):
    '''
    Calculate the insurer's expected net cost of covering a type with a contract.
    Arguments are as in expectedUtility.

    Returns
    -------
    cost : float
        Expected insurer cost; zero for the null contract.
    '''
    validateContract(Contract,PublicInsMax)
    if isNullContract(Contract,PublicInsMax):
        return 0.

    quad_opts = {'epsabs' : IntAbsTol, 'epsrel' : IntRelTol, 'limit' : IntLimit}
    c_0, bounds = exPostCost(Contract,ThisType,0.,PublicInsMax)
    lo, hi = integrationBounds(ThisType,BoundsTol,IntAbsTol,IntRelTol,IntLimit,DstnCheckTol)
    cost = calcZeroLossMass(ThisType,lo,hi,quad_opts)*c_0
    if hi > 0.:
        cost += quad(costIntegrand,max(lo,0.),hi,args=(Contract,ThisType,PublicInsMax),
                     points=findWaypoints(bounds,max(lo,0.),hi),**quad_opts)[0]
    return float(cost)
