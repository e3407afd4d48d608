import unittest
import numpy as np

from CaraLognormalIns.InsuranceErrors import TypeSolutionError
from CaraLognormalIns.TypeSampler import CaraConsumerType, calcCovSqrt, drawLognormalFromMoments, \
                                         censoredNormalMoments, censoredMomentsGap, solveNormalLossParams, \
                                         sampleType, sampleTypes

LogCovMat = np.array([[ 0.25, -0.01, -0.12, 0.00],
                      [-0.01,  0.28, -0.03, 0.00],
                      [-0.12, -0.03,  0.20, 0.00],
                      [ 0.00,  0.00,  0.00, 0.25]])


class testCovSqrt(unittest.TestCase):

    def test_positive_definite(self):
        R = calcCovSqrt(LogCovMat)
        np.testing.assert_allclose(np.dot(R.T,R),LogCovMat,atol=1e-12)

    def test_semi_definite(self):
        CovMat = np.array([[0.25,0.,0.1],
                           [0.,0.,0.],
                           [0.1,0.,0.04]])
        R = calcCovSqrt(CovMat)
        self.assertEqual(R.shape[1],3)
        np.testing.assert_allclose(np.dot(R.T,R),CovMat,atol=1e-12)

    def test_not_semi_definite(self):
        with self.assertRaises(ValueError):
            calcCovSqrt(np.array([[1.,2.],[2.,1.]]))


class testLognormalDraws(unittest.TestCase):

    def test_moments_of_draws(self):
        MeanVec = np.array([1e-5,1330.,4340.,5000.])
        RNG = np.random.default_rng(11)
        draws = drawLognormalFromMoments(MeanVec,LogCovMat,RNG,200000)
        self.assertEqual(draws.shape,(200000,4))
        self.assertTrue(np.all(draws > 0.))
        np.testing.assert_allclose(np.mean(draws,axis=0),MeanVec,rtol=0.02)
        np.testing.assert_allclose(np.cov(np.log(draws),rowvar=False),LogCovMat,atol=0.01)

    def test_zero_variance_component(self):
        MeanVec = np.array([1e-5,1330.,4340.,5000.])
        CovMat = LogCovMat.copy()
        CovMat[1,:] = 0.
        CovMat[:,1] = 0.
        draws = drawLognormalFromMoments(MeanVec,CovMat,np.random.default_rng(3),100)
        np.testing.assert_allclose(draws[:,1],1330.,rtol=1e-12)

    def test_reproducible(self):
        MeanVec = np.array([1e-5,1330.,4340.,5000.])
        draws_a = drawLognormalFromMoments(MeanVec,LogCovMat,np.random.default_rng(5),10)
        draws_b = drawLognormalFromMoments(MeanVec,LogCovMat,np.random.default_rng(5),10)
        np.testing.assert_array_equal(draws_a,draws_b)


class testCensoredNormal(unittest.TestCase):

    def test_moments_match_simulation(self):
        RNG = np.random.default_rng(7)
        for M, S in [(1000.,2000.),(0.,500.),(3000.,1000.)]:
            losses = np.maximum(RNG.normal(M,S,10**6),0.)
            mean, std = censoredNormalMoments(M,S)
            np.testing.assert_allclose(mean,np.mean(losses),rtol=0.01)
            np.testing.assert_allclose(std,np.std(losses),rtol=0.01)

    def test_no_censoring_far_from_zero(self):
        mean, std = censoredNormalMoments(1e5,100.)
        self.assertAlmostEqual(mean,1e5)
        self.assertAlmostEqual(std,100.)

    def test_round_trip(self):
        for MReal, SReal in [(4340.,5000.),(2000.,1000.)]:
            M, S = solveNormalLossParams(MReal,SReal,np.random.default_rng(0))
            self.assertTrue(0. <= M <= MReal)
            self.assertGreaterEqual(S,SReal)
            mean, std = censoredNormalMoments(M,S)
            np.testing.assert_allclose(mean,MReal,rtol=1e-3)
            np.testing.assert_allclose(std,SReal,rtol=1e-3)

    def test_moment_gap_is_unit_free(self):
        mean, std = censoredNormalMoments(2640.,7083.)
        self.assertAlmostEqual(censoredMomentsGap([2640.,7083.],mean,std),0.)
        # A 10% miss in the mean weighs the same whatever the scale of the losses
        for scale in [1.,1e3]:
            gap = censoredMomentsGap([2640.*scale,7083.*scale],1.1*mean*scale,std*scale)
            self.assertAlmostEqual(gap,1. - 1./1.1,places=10)

    def test_mean_condition_is_matched(self):
        # Matching the variance alone at M = MReal leaves the mean 21% too high
        M, S = solveNormalLossParams(4340.,5000.,np.random.default_rng(1))
        self.assertLess(M,4340.*0.99)
        mean, std = censoredNormalMoments(M,S)
        np.testing.assert_allclose(mean,4340.,rtol=1e-3)

    def test_unreachable_moments(self):
        # A censored normal with nonnegative mean cannot be this dispersed
        with self.assertRaises(TypeSolutionError):
            solveNormalLossParams(1000.,5000.,np.random.default_rng(0))
        M, S = solveNormalLossParams(1000.,5000.,np.random.default_rng(0),Tol=np.inf)
        self.assertTrue(0. <= M <= 1000.)
        self.assertGreaterEqual(S,5000.)


class testSampleType(unittest.TestCase):

    def setUp(self):
        self.MeanVec = np.array([1e-5,1330.,4340.,3000.])
        self.CovMat = np.diag([0.04,0.04,0.01,0.01])

    def test_sample_type(self):
        ThisType = sampleType(self.MeanVec,self.CovMat,np.random.default_rng(2))
        self.assertIsInstance(ThisType,CaraConsumerType)
        self.assertGreater(ThisType.A,0.)
        self.assertGreater(ThisType.H,0.)
        self.assertTrue(0. <= ThisType.M <= ThisType.MReal)
        self.assertGreaterEqual(ThisType.S,ThisType.SReal)
        mean, std = censoredNormalMoments(ThisType.M,ThisType.S)
        np.testing.assert_allclose([mean,std],[ThisType.MReal,ThisType.SReal],rtol=1e-3)

    def test_same_seed_same_type(self):
        TypeA = sampleType(self.MeanVec,self.CovMat,np.random.default_rng(4))
        TypeB = sampleType(self.MeanVec,self.CovMat,np.random.default_rng(4))
        self.assertEqual(TypeA.distance(TypeB),0.)

    def test_type_defaults_and_immutability(self):
        ThisType = CaraConsumerType(1e-5,1330.,4340.,16000.)
        self.assertEqual(ThisType.MReal,4340.)
        self.assertEqual(ThisType.SReal,16000.)
        with self.assertRaises(AttributeError):
            ThisType.A = 0.

    def test_sample_types_agrees_with_sample_type(self):
        Types = sampleTypes(self.MeanVec,self.CovMat,2,np.random.default_rng(6))
        self.assertEqual(len(Types),2)
        OneType = sampleType(self.MeanVec,self.CovMat,np.random.default_rng(6))
        # The first draw of (A,H,MReal,SReal) does not depend on N
        np.testing.assert_allclose([Types[0].A,Types[0].H,Types[0].MReal,Types[0].SReal],
                                   [OneType.A,OneType.H,OneType.MReal,OneType.SReal],rtol=1e-12)
        for ThisType in Types:
            mean, std = censoredNormalMoments(ThisType.M,ThisType.S)
            np.testing.assert_allclose([mean,std],[ThisType.MReal,ThisType.SReal],rtol=1e-3)
