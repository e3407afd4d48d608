'''
Example parameters for the CARA-lognormal nonlinear health insurance model: the
menu of contracts and type distribution used to test the model at low precision.
'''
import numpy as np

# Contracts: deductible, coinsurance rate, out-of-pocket maximum
DeductibleVec = np.array([1500., 750., 500., 250., 0.])
CoinsuranceVec = np.array([.1, .1, .1, .1, .1])
OOPmaxVec = np.array([4500., 3750., 3500., 2750., 2500.])
PublicInsMax = 100000.              # Most a consumer pays out of pocket with no private insurance

# Type distribution: means of (A,H,MReal,SReal) and covariance of their logs
SRealMean = np.sqrt(25000.**2 - 5100.**2)
TypeMeanVec = np.array([1e-5, 1330., 4340., SRealMean])
TypeLogCovMat = np.array([[ 0.25, -0.01, -0.12, 0.00],
                          [-0.01,  0.28, -0.03, 0.00],
                          [-0.12, -0.03,  0.20, 0.00],
                          [ 0.00,  0.00,  0.00, 0.25]])

# Numerical settings
BoundsTol = 1e-2                    # Precision of the search for loss integration bounds
IntAbsTol = 1e-15                   # Absolute tolerance of all integrals
IntRelTol = 1e-12                   # Relative tolerance of all integrals
IntLimit = 200                      # Maximum number of subintervals per integral
DstnCheckTol = 1e-6                 # Allowed deviation from one of the truncated density mass
OrderingTol = 1e-6                  # Allowed relative excess of uninsured over insured utility
# A normal with nonnegative mean, censored at zero, has SReal/MReal of at most 1.46; most of
# these types are above that, so accept the closest (M,S) rather than failing.
TypeSolveTol = np.inf
TypeSolveMaxIter = 250              # Maximum annealing iterations when matching loss moments

init_cara_lognormal = {'DeductibleVec' : DeductibleVec,
                       'CoinsuranceVec' : CoinsuranceVec,
                       'OOPmaxVec' : OOPmaxVec,
                       'PublicInsMax' : PublicInsMax,
                       'TypeMeanVec' : TypeMeanVec,
                       'TypeLogCovMat' : TypeLogCovMat,
                       'BoundsTol' : BoundsTol,
                       'IntAbsTol' : IntAbsTol,
                       'IntRelTol' : IntRelTol,
                       'IntLimit' : IntLimit,
                       'DstnCheckTol' : DstnCheckTol,
                       'OrderingTol' : OrderingTol,
                       'TypeSolveTol' : TypeSolveTol,
                       'TypeSolveMaxIter' : TypeSolveMaxIter,
                       'verbose' : False
                      }
