'''
Consumer types for the CARA-lognormal insurance model, and functions for
drawing them.  Primitive parameters (A,H,MReal,SReal) are jointly lognormal.
MReal and SReal are the mean and standard deviation of losses once negative
draws are set to zero; the parameters (M,S) of the underlying normal loss
distribution are recovered by solving for the censored normal's moments.
'''
import numpy as np
from scipy.special import ndtr
from scipy.optimize import dual_annealing

from .InsuranceContracts import FrozenRecord
from .InsuranceErrors import TypeSolutionError


class CaraConsumerType(FrozenRecord):
    '''
    A consumer type: absolute risk aversion A, moral hazard H, parameters (M,S)
    of the normal loss distribution, and the target mean and standard deviation
    (MReal,SReal) of losses censored at zero.
    '''
    distance_criteria = ['A','H','M','S','MReal','SReal']

    def __init__(self,A,H,M,S,MReal=None,SReal=None):
        '''
        Make a new consumer type.  MReal and SReal default to M and S.

        Parameters
        ----------
        A : float
            Coefficient of absolute risk aversion.
        H : float
            Moral hazard: magnitude of the spending response to insurance.
        M : float
            Mean of the normal loss distribution.
        S : float
            Standard deviation of the normal loss distribution.
        MReal : float
            Mean of losses censored at zero.
        SReal : float
            Standard deviation of losses censored at zero.

        Returns
        -------
        None
        '''
        if MReal is None:
            MReal = M
        if SReal is None:
            SReal = S
        self._set(A=float(A),H=float(H),M=float(M),S=float(S),MReal=float(MReal),SReal=float(SReal))


def calcCovSqrt(CovMat):
    '''
    Find a square root R of a covariance matrix, with R.T*R = CovMat.  Uses the
    Cholesky factor when the matrix is positive definite and an eigenvalue
    decomposition when it is only semi-definite (e.g. some zero variance), in
    which case R has one row per positive eigenvalue.

    Parameters
    ----------
    CovMat : np.array
        Symmetric positive semi-definite matrix.

    Returns
    -------
    R : np.array
        Covariance square root, with as many columns as CovMat.
    '''
    CovMat = np.atleast_2d(np.asarray(CovMat,dtype=float))
    try:
        return np.linalg.cholesky(CovMat).T
    except np.linalg.LinAlgError:
        pass
    vals, vecs = np.linalg.eigh((CovMat + CovMat.T)/2.)
    tol = 10.*CovMat.shape[0]*np.finfo(float).eps*np.max(np.abs(vals))
    if np.any(vals < -tol):
        raise ValueError('Covariance matrix must be positive semi-definite')
    keep = vals > tol
    return (vecs[:,keep]*np.sqrt(vals[keep])).T


def drawLognormalFromMoments(MeanVec,LogCovMat,RNG,N=1):
    '''
    Draw from a multivariate lognormal distribution with given means (in levels)
    and covariance of logs.

    Parameters
    ----------
    MeanVec : np.array
        Means of the lognormal variables.
    LogCovMat : np.array
        Covariance matrix of the logs of the variables.
    RNG : np.random.Generator
        Source of randomness.
    N : int
        Number of draws.

    Returns
    -------
    draws : np.array
        Array of shape (N,len(MeanVec)), one draw per row.
    '''
    MeanVec = np.asarray(MeanVec,dtype=float)
    R = calcCovSqrt(LogCovMat)
    b = np.sum(R**2,axis=0)
    mu = np.log(MeanVec) - b/2.
    z = RNG.standard_normal((N,R.shape[0]))
    return np.exp(mu + np.dot(z,R))


def censoredNormalMoments(M,S):
    '''
    Mean and standard deviation of max(X,0) when X ~ Normal(M,S).

    Parameters
    ----------
    M : float
        Mean of X.
    S : float
        Standard deviation of X.

    Returns
    -------
    mean : float
        Mean of the censored variable.
    std : float
        Standard deviation of the censored variable.
    '''
    alpha = -M/S
    Psi = ndtr(alpha)  # Probability of a censored draw
    psi = np.exp(-0.5*alpha**2)/np.sqrt(2.*np.pi)
    mills = psi/(1. - Psi)
    mean = (1. - Psi)*M + S*psi
    var = S**2*(1. - Psi)*(1. - mills**2 + mills*alpha + (alpha - mills)**2*Psi)
    return mean, np.sqrt(max(var,0.))


def censoredMomentsGap(x,MReal,SReal):
    '''
    Sum of absolute relative residuals of the censored normal moment conditions
    at (M,S) = x.  Both conditions are scaled to be unit free.
    '''
    mean, std = censoredNormalMoments(x[0],x[1])
    return abs(mean/MReal - 1.) + abs(std**2/SReal**2 - 1.)


def solveNormalLossParams(MReal,SReal,RNG,MaxIter=250,Tol=1e-3):
    '''
    Find the mean M and standard deviation S of a normal distribution whose
    censoring at zero has mean MReal and standard deviation SReal.  There is no
    closed form, so the relative residuals are minimized by dual annealing over
    M in [0,MReal] and S in [SReal,Smax], starting from (MReal,SReal).  The mean
    of the censored variable is at least S/sqrt(2*pi) when M is nonnegative, so
    Smax only needs to exceed sqrt(2*pi)*MReal.

    Parameters
    ----------
    MReal : float
        Target mean of the censored loss.
    SReal : float
        Target standard deviation of the censored loss.
    RNG : np.random.Generator
        Source of randomness for the annealing.
    MaxIter : int
        Maximum number of annealing iterations.
    Tol : float
        Largest allowed relative error in the implied mean and standard deviation.

    Returns
    -------
    M : float
        Mean of the normal loss distribution.
    S : float
        Standard deviation of the normal loss distribution.
    '''
    Smax = 2.*max(SReal,np.sqrt(2.*np.pi)*MReal)
    bounds = [(0.,MReal),(SReal,Smax)]
    local_kwargs = {'method' : 'Nelder-Mead',
                    'bounds' : bounds,
                    'options' : {'xatol' : 1e-8, 'fatol' : 1e-8, 'maxiter' : 2000}}
    res = dual_annealing(censoredMomentsGap,bounds,args=(MReal,SReal),maxiter=MaxIter,
                         minimizer_kwargs=local_kwargs,seed=RNG,x0=np.array([MReal,SReal]))
    M, S = res.x

    mean, std = censoredNormalMoments(M,S)
    mean_err = abs(mean - MReal)/MReal
    std_err = abs(std - SReal)/SReal
    if max(mean_err,std_err) > Tol:
        raise TypeSolutionError('Could not match censored loss moments (MReal,SReal) = (%.4f,%.4f); best (M,S) = (%.4f,%.4f) '
                                'implies (%.4f,%.4f)' % (MReal,SReal,M,S,mean,std))
    return M, S


def sampleType(MeanVec,LogCovMat,RNG,MaxIter=250,Tol=1e-3):
    '''
    Draw one consumer type: draw (A,H,MReal,SReal) from the lognormal type
    distribution, then solve for the normal loss parameters (M,S).

    Parameters
    ----------
    MeanVec : np.array
        Means of (A,H,MReal,SReal).
    LogCovMat : np.array
        4x4 covariance matrix of their logs.
    RNG : np.random.Generator
        Source of randomness.
    MaxIter : int
        Maximum number of annealing iterations when solving for (M,S).
    Tol : float
        Largest allowed relative error in the matched moments.

    Returns
    -------
    ThisType : CaraConsumerType
        The drawn consumer type.
    '''
    return sampleTypes(MeanVec,LogCovMat,1,RNG,MaxIter,Tol)[0]


def sampleTypes(MeanVec,LogCovMat,N,RNG,MaxIter=250,Tol=1e-3):
    '''
    Draw N independent consumer types.  All (A,H,MReal,SReal) are drawn first,
    then (M,S) is solved for each in turn; arguments are as in sampleType.

    Returns
    -------
    Types : [CaraConsumerType]
        The drawn consumer types.
    '''
    draws = drawLognormalFromMoments(MeanVec,LogCovMat,RNG,N)
    Types = []
    for A, H, MReal, SReal in draws:
        M, S = solveNormalLossParams(MReal,SReal,RNG,MaxIter,Tol)
        Types.append(CaraConsumerType(A,H,M,S,MReal,SReal))
    return Types
