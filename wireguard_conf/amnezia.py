import random
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidAmneziaSetting
from .render import render_amnezia

# Message type headers are 32-bit; 1..4 are the stock WireGuard values
H_MIN = 5
H_MAX = 2**31 - 1

JC_MAX = 128
JUNK_MAX = 1280
S1_MAX = 1132
S2_MAX = 1188
# Size difference between handshake init and response messages
S1_S2_OFFSET = 56


@dataclass()
class AmneziaSettings:
    """AmneziaWG obfuscation values.

    Only meaningful as a whole block: ``validate()`` checks the fields against
    each other, construction checks nothing.
    """

    jc: int
    jmin: int
    jmax: int
    s1: int
    s2: int
    h1: int
    h2: int
    h3: int
    h4: int
    i1: Optional[str] = None
    i2: Optional[str] = None
    i3: Optional[str] = None
    i4: Optional[str] = None
    i5: Optional[str] = None

    @classmethod
    def random(cls) -> "AmneziaSettings":
        """Pick values in the recommended ranges; the result always validates."""
        jc = random.randint(4, 12)
        jmin = random.randint(8, 64)
        jmax = random.randint(max(jmin + 1, 40), 120)
        s1 = random.randint(15, 150)
        s2 = random.choice([x for x in range(15, 151) if x != s1 + S1_S2_OFFSET])
        h1, h2, h3, h4 = random.sample(range(H_MIN, H_MAX + 1), 4)
        return cls(jc=jc, jmin=jmin, jmax=jmax, s1=s1, s2=s2, h1=h1, h2=h2, h3=h3, h4=h4)

    def validate(self) -> None:
        """Raise InvalidAmneziaSetting naming the first field that is out of range."""
        if not 1 <= self.jc <= JC_MAX:
            raise InvalidAmneziaSetting("Jc")
        if not (0 <= self.jmin < JUNK_MAX and self.jmin <= self.jmax):
            raise InvalidAmneziaSetting("Jmin")
        if not self.jmax <= JUNK_MAX:
            raise InvalidAmneziaSetting("Jmax")
        if not (0 <= self.s1 <= S1_MAX and self.s1 + S1_S2_OFFSET != self.s2):
            raise InvalidAmneziaSetting("S1")
        if not 0 <= self.s2 <= S2_MAX:
            raise InvalidAmneziaSetting("S2")
        headers = (self.h1, self.h2, self.h3, self.h4)
        if len(set(headers)) != len(headers):
            raise InvalidAmneziaSetting("H1/H2/H3/H4")

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidAmneziaSetting:
            return False
        return True

    def apply_args_overrides(self, args: object) -> None:
        for attr in ("jc", "jmin", "jmax", "s1", "s2", "h1", "h2", "h3", "h4"):
            val = getattr(args, attr, None)
            if val is not None:
                setattr(self, attr, int(val))
        for attr in ("i1", "i2", "i3", "i4", "i5"):
            val = getattr(args, attr, None)
            if val is not None:
                setattr(self, attr, val or None)

    def __str__(self) -> str:
        return render_amnezia(self)
