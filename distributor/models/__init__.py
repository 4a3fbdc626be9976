"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
This means we get runtime deserialization and validation for free just by using type declarations.

Use these in your code as python objects, then serialize to json with `.model_dump()`
"""

from distributor.models.Amount import *
from distributor.models.Claim import *
from distributor.models.Config import *
from distributor.models.Epoch import *
from distributor.models.Liquidity import *
from distributor.models.types import *
