"""Base analyzer class for the statistics that recipe steps delegate to."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for data analysis components.

    All analyzers must:
    1. Accept the data (a DataFrame slice) in their constructor
    2. Implement fit() to perform the analysis and return self for chaining
    3. Implement result() to return a frozen dataclass with results

    Analyzers are pure computation (no plotting, no logging of data). Recipe
    steps build one analyzer per fit and keep only what they need from its
    result as fitted state, so an analyzer never outlives the fit that made it.

    ### Adding a New Analyzer

    ```python
    @dataclass(frozen=True)
    class MyAnalysisResult:
        '''Results package for MyAnalyzer.'''
        summary: pd.DataFrame

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, df: pd.DataFrame):
            self._df = df
            self._fitted = False

        def fit(self) -> "MyAnalyzer":
            # ... computation logic ...
            self._fitted = True
            return self

        def result(self) -> MyAnalysisResult:
            if not self._fitted:
                raise ValueError("Analyzer not fitted. Call fit() first.")
            return MyAnalysisResult(...)
    ```

    Then use it from a step's ``fit()`` and store the fields needed by
    ``apply()`` on the step's fitted-state dataclass.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Fit the analyzer to the data.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return analysis results as a frozen dataclass instance.

        Returns:
            A frozen @dataclass containing all analysis results.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
