"""Level graph models: nodes, edges and the transactions fingerprint nodes carry"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from level_rewards.exceptions import InvalidInput

FINGERPRINT_NODE_TYPE = 'fingerprintNode'


class TransactionStatus(str, Enum):
    SUCCESS = 'Success'
    FAIL = 'Fail'
    PENDING = 'Pending'


class Transaction(BaseModel):
    """Simulated blockchain transaction shown on a fingerprint node"""
    model_config = ConfigDict(extra='allow')

    id: str
    currency: str
    amount: float = Field(..., ge=0)
    status: TransactionStatus
    date: Optional[str] = None
    transaction: Optional[str] = None  # transaction hash


class NodeData(BaseModel):
    model_config = ConfigDict(extra='allow')

    label: Optional[str] = None
    transaction: Optional[Transaction] = None


class Node(BaseModel):
    model_config = ConfigDict(extra='allow')

    id: str
    type: str
    data: NodeData = Field(default_factory=NodeData)

    @model_validator(mode='after')
    def _fingerprint_has_transaction(self) -> 'Node':
        if self.type == FINGERPRINT_NODE_TYPE and self.data.transaction is None:
            raise ValueError(f"Fingerprint node {self.id} has no transaction")
        return self

    @property
    def is_fingerprint(self) -> bool:
        return self.type == FINGERPRINT_NODE_TYPE and self.data.transaction is not None


class Edge(BaseModel):
    model_config = ConfigDict(extra='allow')

    id: str
    source: str
    target: str


class Level(BaseModel):
    """
    A numbered gamification stage and its node/edge graph.

    Only the fields the distribution pass reads are typed; everything else
    in the stored document (positions, styles, handles, metadata) is kept
    as extra data and written back unchanged by to_document().
    """
    model_config = ConfigDict(extra='allow')

    level: int = Field(..., ge=1)
    name: Optional[str] = None
    description: Optional[str] = None
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> 'Level':
        """Validate a level JSON document ({level, nodes: [...], edges: [...]})"""
        if not isinstance(document, dict):
            raise InvalidInput(f"Level document must be an object, got {type(document).__name__}")
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise InvalidInput(f"Malformed level document: {e}") from e

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude_unset=True)

    def fingerprint_nodes(self) -> List[Node]:
        return [node for node in self.nodes if node.is_fingerprint]
