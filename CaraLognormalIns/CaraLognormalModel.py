'''
A health insurance model as in Azevedo and Gottlieb: CARA preferences, normal
losses, lognormally distributed consumer types, and contracts parametrized by a
deductible, a coinsurance rate, and an out-of-pocket maximum as in Einav et al.
(2013).  The model object is the interface used by population and equilibrium
code: it evaluates willingness to pay and cost for (contract,type) pairs and
draws consumer types.
'''
from time import time
import numpy as np
from joblib import Parallel, delayed

from .InsuranceContracts import FrozenRecord, makeContractList, makeNullContract, validateContract
from .ExpectedValue import expectedUtility, expectedCost
from .TypeSampler import sampleType, sampleTypes


def evalTypeAgainstContracts(Model,ThisType,Contracts):
    '''
    Willingness to pay and expected cost of one type for each of several contracts.
    '''
    u = np.array([Model.expectedUtility(Contract,ThisType) for Contract in Contracts])
    c = np.array([Model.expectedCost(Contract,ThisType) for Contract in Contracts])
    return u, c


class HealthCaraLognormalModel(FrozenRecord):
    '''
    The CARA-lognormal nonlinear health insurance model.  Consumer parameters
    are ordered A, H, MReal, SReal (absolute risk aversion, moral hazard, and the
    mean and standard deviation of losses).  Instances cannot be changed after
    they are made.
    '''
    distance_criteria = ['contracts','PublicInsMax','TypeMeanVec','TypeLogCovMat']

    def __init__(self,DeductibleVec,CoinsuranceVec,OOPmaxVec,PublicInsMax,TypeMeanVec,TypeLogCovMat,
                 BoundsTol=1e-2,IntAbsTol=1e-15,IntRelTol=1e-12,IntLimit=200,DstnCheckTol=1e-6,
                 OrderingTol=1e-6,TypeSolveTol=1e-3,TypeSolveMaxIter=250,verbose=False):
        '''
        Make a new instance of the model.

        Parameters
        ----------
        DeductibleVec : np.array
            Deductibles of the contracts offered.
        CoinsuranceVec : np.array
            Coinsurance rates of the contracts offered.
        OOPmaxVec : np.array
            Out-of-pocket maxima of the contracts offered.
        PublicInsMax : float
            Public insurance maximum: the most a consumer ever pays out of pocket.
        TypeMeanVec : np.array
            Means of the type parameters (A,H,MReal,SReal).
        TypeLogCovMat : np.array
            4x4 covariance matrix of the logs of the type parameters.
        BoundsTol : float
            Precision of the search for loss integration bounds.
        IntAbsTol : float
            Absolute tolerance of all integrals.
        IntRelTol : float
            Relative tolerance of all integrals.
        IntLimit : int
            Maximum number of subintervals per integral.
        DstnCheckTol : float
            Allowed deviation from one of the loss density mass over the bounds.
        OrderingTol : float
            Allowed relative excess of utility without insurance over utility with it.
        TypeSolveTol : float
            Allowed relative error when matching a type's censored loss moments;
            np.inf accepts the best point found.
        TypeSolveMaxIter : int
            Maximum number of annealing iterations when matching loss moments.
        verbose : bool
            Whether to print timing information for batch operations.

        Returns
        -------
        None
        '''
        TypeMeanVec = np.array(TypeMeanVec,dtype=float)
        TypeLogCovMat = np.array(TypeLogCovMat,dtype=float)
        TypeMeanVec.flags.writeable = False
        TypeLogCovMat.flags.writeable = False
        contracts = tuple(makeContractList(DeductibleVec,CoinsuranceVec,OOPmaxVec))
        NullContract = makeNullContract(PublicInsMax)
        for Contract in contracts:
            validateContract(Contract,PublicInsMax)

        self._set(contracts=contracts,nullContract=NullContract,PublicInsMax=float(PublicInsMax),
                  TypeMeanVec=TypeMeanVec,TypeLogCovMat=TypeLogCovMat,
                  BoundsTol=BoundsTol,IntAbsTol=IntAbsTol,IntRelTol=IntRelTol,IntLimit=IntLimit,
                  DstnCheckTol=DstnCheckTol,OrderingTol=OrderingTol,TypeSolveTol=TypeSolveTol,
                  TypeSolveMaxIter=TypeSolveMaxIter,verbose=verbose)

    @property
    def nContracts(self):
        return len(self.contracts)

    def validateContract(self,Contract):
        validateContract(Contract,self.PublicInsMax)

    def expectedUtility(self,Contract,ThisType):
        '''
        Willingness to pay of a consumer type for a contract, relative to the
        null contract.

        Parameters
        ----------
        Contract : NonlinearContract
            The insurance contract.
        ThisType : CaraConsumerType
            The consumer type.

        Returns
        -------
        u : float
            Willingness to pay; zero for the null contract.
        '''
        return expectedUtility(Contract,ThisType,self.PublicInsMax,self.BoundsTol,self.IntAbsTol,
                               self.IntRelTol,self.IntLimit,self.DstnCheckTol,self.OrderingTol)

    def expectedCost(self,Contract,ThisType):
        '''
        Expected cost to the insurer of covering a consumer type with a contract.

        Parameters
        ----------
        Contract : NonlinearContract
            The insurance contract.
        ThisType : CaraConsumerType
            The consumer type.

        Returns
        -------
        c : float
            Expected insurer cost; zero for the null contract.
        '''
        return expectedCost(Contract,ThisType,self.PublicInsMax,self.BoundsTol,self.IntAbsTol,
                            self.IntRelTol,self.IntLimit,self.DstnCheckTol)

    def sampleType(self,RNG):
        '''
        Draw one consumer type from the type distribution.

        Parameters
        ----------
        RNG : np.random.Generator
            Source of randomness.

        Returns
        -------
        ThisType : CaraConsumerType
            The drawn type.
        '''
        return sampleType(self.TypeMeanVec,self.TypeLogCovMat,RNG,self.TypeSolveMaxIter,self.TypeSolveTol)

    def sampleTypes(self,N,RNG):
        '''
        Draw N independent consumer types from the type distribution.

        Parameters
        ----------
        N : int
            Number of types to draw.
        RNG : np.random.Generator
            Source of randomness.

        Returns
        -------
        Types : [CaraConsumerType]
            The drawn types.
        '''
        t_start = time()
        Types = sampleTypes(self.TypeMeanVec,self.TypeLogCovMat,N,RNG,self.TypeSolveMaxIter,self.TypeSolveTol)
        t_end = time()
        if self.verbose:
            print('Drawing ' + str(N) + ' consumer types took ' + str(t_end-t_start) + ' seconds.')
        return Types

    def calcUtilityAndCostArrays(self,Types,Contracts=None,n_jobs=1):
        '''
        Evaluate willingness to pay and expected cost for every pair of a type
        and a contract.  Types are processed in parallel with joblib.

        Parameters
        ----------
        Types : [CaraConsumerType]
            Consumer types to evaluate.
        Contracts : [NonlinearContract] or None
            Contracts to evaluate; defaults to the contracts of the model.
        n_jobs : int
            Number of parallel jobs, as for joblib.Parallel.

        Returns
        -------
        uArray : np.array
            Willingness to pay, of shape (len(Types),len(Contracts)).
        cArray : np.array
            Expected cost, of shape (len(Types),len(Contracts)).
        '''
        if Contracts is None:
            Contracts = self.contracts
        Contracts = list(Contracts)
        if len(Types) == 0:
            return np.zeros((0,len(Contracts))), np.zeros((0,len(Contracts)))

        t_start = time()
        results = Parallel(n_jobs=n_jobs)(delayed(evalTypeAgainstContracts)(self,ThisType,Contracts) for ThisType in Types)
        uArray = np.vstack([res[0] for res in results]).reshape((len(Types),len(Contracts)))
        cArray = np.vstack([res[1] for res in results]).reshape((len(Types),len(Contracts)))
        t_end = time()
        if self.verbose:
            print('Evaluating ' + str(len(Types)) + ' types on ' + str(len(Contracts)) + ' contracts took '
                  + str(t_end-t_start) + ' seconds.')
        return uArray, cArray

    def suggestComputationParameters(self,percentError,RNG,PilotCount=100,n_jobs=1):
        '''
        Suggest a population size and settings for equilibrium and optimum
        searches that target a given percent error.  The price scale is the
        mean expected cost in a pilot sample of types.

        Parameters
        ----------
        percentError : float
            Target error, as a fraction.
        RNG : np.random.Generator
            Source of randomness for the pilot sample.
        PilotCount : int
            Number of types in the pilot sample.
        n_jobs : int
            Number of parallel jobs used to evaluate the pilot sample.

        Returns
        -------
        populationSize : int
            Suggested number of consumers.
        EquilibriumParams : dict
            Suggested 'behavioralAgents', 'fudge', 'tolerance', and 'maxIterations'
            for an equilibrium search.
        OptimumParams : dict
            Suggested 'tolerance' and 'maxIterations' for an optimum search.
        '''
        PilotTypes = self.sampleTypes(PilotCount,RNG)
        cArray = self.calcUtilityAndCostArrays(PilotTypes,n_jobs=n_jobs)[1]
        priceOrderOfMagnitude = np.mean(cArray)

        populationSize = int(np.floor(self.nContracts/percentError**2/2.))
        fudge = percentError/self.nContracts/100.
        EquilibriumParams = {'behavioralAgents' : percentError,
                             'fudge' : fudge,
                             'tolerance' : percentError*priceOrderOfMagnitude,
                             'maxIterations' : int(np.floor(10./fudge))}
        OptimumParams = {'tolerance' : EquilibriumParams['tolerance'],
                         'maxIterations' : 10**4}
        return populationSize, EquilibriumParams, OptimumParams
