'''
This module contains the nonlinear health insurance contract class, the null
contract that represents the public backstop, and the contract validity check.
'''
import numpy as np
from HARK.metric import MetricObject

from .InsuranceErrors import InvalidContractError


class FrozenRecord(MetricObject):
    '''
    A MetricObject whose attributes cannot be changed after construction.  Used
    for contracts and consumer types, which are shared by reference across
    many evaluations.
    '''
    def __setattr__(self,name,value):
        raise AttributeError(type(self).__name__ + ' is immutable; cannot set ' + name)

    def __delattr__(self,name):
        raise AttributeError(type(self).__name__ + ' is immutable; cannot delete ' + name)

    def _set(self,**kwds):
        for key in kwds:
            object.__setattr__(self,key,kwds[key])

    def __repr__(self):
        return type(self).__name__ + '(' + ', '.join([key + '=' + repr(getattr(self,key)) for key in self.distance_criteria]) + ')'


class NonlinearContract(FrozenRecord):
    '''
    A medical insurance contract characterized by a deductible, a coinsurance
    rate, and an out-of-pocket maximum.  Below the deductible the policyholder
    pays full price for care; above it she pays the coinsurance share until
    her total payment reaches the out-of-pocket maximum.
    '''
    distance_criteria = ['deductible','coinsurance','oopMax']

    def __init__(self,deductible,coinsurance,oopMax,name=''):
        '''
        Make a new nonlinear insurance contract.

        Parameters
        ----------
        deductible : float
            Deductible for this contract.
        coinsurance : float
            Share of spending above the deductible paid by the policyholder.
        oopMax : float
            Out-of-pocket maximum for this contract.
        name : str
            Label for the contract.

        Returns
        -------
        None
        '''
        self._set(deductible=float(deductible),coinsurance=float(coinsurance),
                  oopMax=float(oopMax),name=str(name))


def makeNullContract(PublicInsMax):
    '''
    Make the contract representing "no private insurance": losses are paid
    out of pocket up to the public insurance maximum.
    '''
    return NonlinearContract(PublicInsMax,1.0,PublicInsMax,'Null Contract')


def makeContractList(DeductibleVec,CoinsuranceVec,OOPmaxVec):
    '''
    Make a list of contracts from vectors of deductibles, coinsurance rates, and
    out-of-pocket maxima.  Contracts are named by their (one-based) position.

    Parameters
    ----------
    DeductibleVec : np.array
        Deductibles of the contracts.
    CoinsuranceVec : np.array
        Coinsurance rates of the contracts.
    OOPmaxVec : np.array
        Out-of-pocket maxima of the contracts.

    Returns
    -------
    ContractList : [NonlinearContract]
        List of contracts, one per element of the input vectors.
    '''
    DeductibleVec = np.atleast_1d(DeductibleVec)
    CoinsuranceVec = np.atleast_1d(CoinsuranceVec)
    OOPmaxVec = np.atleast_1d(OOPmaxVec)
    if not (DeductibleVec.size == CoinsuranceVec.size == OOPmaxVec.size):
        raise InvalidContractError('Deductible, coinsurance, and out-of-pocket maximum vectors must have the same length')
    ContractList = []
    for i in range(DeductibleVec.size):
        ContractList.append(NonlinearContract(DeductibleVec[i],CoinsuranceVec[i],OOPmaxVec[i],str(i+1)))
    return ContractList


def isNullContract(Contract,PublicInsMax):
    '''
    Any contract whose deductible is the public insurance maximum provides no
    private coverage.
    '''
    return Contract.deductible == PublicInsMax


def validateContract(Contract,PublicInsMax):
    '''
    Check that a contract is well formed, raising InvalidContractError if not.

    Parameters
    ----------
    Contract : NonlinearContract
        The contract to check.
    PublicInsMax : float
        Public insurance maximum; no contract may have a higher out-of-pocket maximum.

    Returns
    -------
    None
    '''
    if (Contract.coinsurance < 0.) or (Contract.coinsurance > 1.):
        raise InvalidContractError('Coinsurance must be between zero and one')
    elif (Contract.deductible > Contract.oopMax) or (Contract.deductible < 0.):
        raise InvalidContractError('Deductible must be higher than zero, and lower than the out of pocket maximum')
    elif Contract.oopMax > PublicInsMax:
        raise InvalidContractError('Out of pocket maximum must be lower than the public insurance maximum')
