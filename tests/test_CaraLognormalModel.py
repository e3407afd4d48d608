import unittest
from copy import copy
import numpy as np

from CaraLognormalIns import HealthCaraLognormalModel, CaraConsumerType, NonlinearContract, InvalidContractError
from CaraLognormalIns.CaraLognormalParameters import init_cara_lognormal
from CaraLognormalIns.ExpectedValue import expectedUtility, expectedCost
from CaraLognormalIns.TypeSampler import censoredNormalMoments


def makeTestModel(**kwds):
    params = copy(init_cara_lognormal)
    # Moments that a censored normal can match, with little dispersion
    params['TypeMeanVec'] = np.array([1e-5,1330.,4340.,3000.])
    params['TypeLogCovMat'] = np.diag([0.04,0.04,0.01,0.01])
    params['TypeSolveTol'] = 1e-3
    params.update(kwds)
    return HealthCaraLognormalModel(**params)


class testModelConstruction(unittest.TestCase):

    def test_default_parameters(self):
        Model = HealthCaraLognormalModel(**init_cara_lognormal)
        self.assertEqual(Model.nContracts,5)
        self.assertEqual([Contract.name for Contract in Model.contracts],['1','2','3','4','5'])
        self.assertEqual(Model.contracts[0].deductible,1500.)
        self.assertEqual(Model.contracts[4].oopMax,2500.)
        self.assertEqual(Model.nullContract.deductible,Model.PublicInsMax)
        self.assertEqual(Model.nullContract.coinsurance,1.)

    def test_model_is_immutable(self):
        Model = makeTestModel()
        with self.assertRaises(AttributeError):
            Model.PublicInsMax = 10.
        with self.assertRaises(ValueError):
            Model.TypeMeanVec[0] = 1.

    def test_invalid_contract_in_menu(self):
        with self.assertRaises(InvalidContractError):
            makeTestModel(OOPmaxVec=np.array([4500.,3750.,3500.,2750.,2e5]))

    def test_validate_contract(self):
        Model = makeTestModel()
        Model.validateContract(Model.contracts[0])
        Model.validateContract(Model.nullContract)
        with self.assertRaises(InvalidContractError):
            Model.validateContract(NonlinearContract(100.,0.1,50.))


class testModelEvaluation(unittest.TestCase):

    def setUp(self):
        self.Model = makeTestModel()
        self.ThisType = CaraConsumerType(1e-5,1330.,4340.,16000.)

    def test_null_contract(self):
        self.assertEqual(self.Model.expectedUtility(self.Model.nullContract,self.ThisType),0.)
        self.assertEqual(self.Model.expectedCost(self.Model.nullContract,self.ThisType),0.)

    def test_matches_engine(self):
        Contract = self.Model.contracts[2]
        self.assertEqual(self.Model.expectedUtility(Contract,self.ThisType),
                         expectedUtility(Contract,self.ThisType,self.Model.PublicInsMax))
        self.assertEqual(self.Model.expectedCost(Contract,self.ThisType),
                         expectedCost(Contract,self.ThisType,self.Model.PublicInsMax))

    def test_utility_and_cost_arrays(self):
        Types = [self.ThisType,CaraConsumerType(0.,500.,2000.,3000.)]
        Contracts = [self.Model.contracts[0],self.Model.nullContract]
        uArray, cArray = self.Model.calcUtilityAndCostArrays(Types,Contracts)
        self.assertEqual(uArray.shape,(2,2))
        self.assertEqual(cArray.shape,(2,2))
        self.assertEqual(uArray[1,0],self.Model.expectedUtility(Contracts[0],Types[1]))
        self.assertEqual(cArray[0,0],self.Model.expectedCost(Contracts[0],Types[0]))
        np.testing.assert_array_equal(uArray[:,1],[0.,0.])
        np.testing.assert_array_equal(cArray[:,1],[0.,0.])

    def test_empty_type_list(self):
        uArray, cArray = self.Model.calcUtilityAndCostArrays([])
        self.assertEqual(uArray.shape,(0,5))
        self.assertEqual(cArray.shape,(0,5))


class testModelSampling(unittest.TestCase):

    def test_sample_type(self):
        Model = makeTestModel()
        ThisType = Model.sampleType(np.random.default_rng(8))
        mean, std = censoredNormalMoments(ThisType.M,ThisType.S)
        np.testing.assert_allclose([mean,std],[ThisType.MReal,ThisType.SReal],rtol=1e-3)

    def test_sample_types(self):
        Model = makeTestModel()
        Types = Model.sampleTypes(3,np.random.default_rng(9))
        self.assertEqual(len(Types),3)
        for ThisType in Types:
            self.assertTrue(0. <= ThisType.M <= ThisType.MReal)
            self.assertGreaterEqual(ThisType.S,ThisType.SReal)
        TypesAgain = Model.sampleTypes(3,np.random.default_rng(9))
        for j in range(3):
            self.assertEqual(Types[j].distance(TypesAgain[j]),0.)

    def test_suggest_computation_parameters(self):
        Model = makeTestModel(DeductibleVec=np.array([500.,0.]),CoinsuranceVec=np.array([.1,.1]),
                              OOPmaxVec=np.array([3500.,2500.]))
        populationSize, EquilibriumParams, OptimumParams = \
            Model.suggestComputationParameters(0.5,np.random.default_rng(10),PilotCount=2)
        self.assertEqual(populationSize,4)
        self.assertEqual(EquilibriumParams['behavioralAgents'],0.5)
        self.assertAlmostEqual(EquilibriumParams['fudge'],0.0025)
        self.assertIn(EquilibriumParams['maxIterations'],[3999,4000])
        self.assertGreater(EquilibriumParams['tolerance'],0.)
        self.assertEqual(OptimumParams['tolerance'],EquilibriumParams['tolerance'])
        self.assertEqual(OptimumParams['maxIterations'],10**4)
