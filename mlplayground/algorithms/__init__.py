"""
Numeric core of the playground: regression, k-means, logistic regression,
a centroid-based linear SVM, naive Bayes text scoring and loss functions.

Every function is a pure transform over caller-owned data; only numpy is used.
"""

from .errors import DegenerateInputError, InvalidParameterError, PlaygroundError
from .entities import (Centroid, ClassificationResult, Hyperplane, LogisticModel, NaiveBayesStep, Point,
                       RegressionModel)
from .options import AlgorithmOptions
from .linear_regression import fit_linear_regression
from .kmeans import KMeansState, KMeansStatus, advance, init_state, initialize_centroids, iterate, run, step
from .logistic_regression import LogisticResult, train_logistic_regression
from .svm import SVMResult, fit_linear_svm
from .naive_bayes import WordProbabilityTable, classify_text, tokenize
from .loss_functions import LOSS_FUNCTIONS, compute_loss
from .api import ALGORITHMS, serve_request

__all__ = [
    'PlaygroundError', 'DegenerateInputError', 'InvalidParameterError',
    'Point', 'Centroid', 'RegressionModel', 'LogisticModel', 'Hyperplane',
    'NaiveBayesStep', 'ClassificationResult', 'AlgorithmOptions',
    'fit_linear_regression',
    'KMeansState', 'KMeansStatus', 'initialize_centroids', 'init_state', 'step', 'advance', 'iterate', 'run',
    'LogisticResult', 'train_logistic_regression',
    'SVMResult', 'fit_linear_svm',
    'WordProbabilityTable', 'classify_text', 'tokenize',
    'LOSS_FUNCTIONS', 'compute_loss',
    'ALGORITHMS', 'serve_request',
]
