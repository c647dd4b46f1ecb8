# helps local imports without coupling to models (avoids cycles)
from typing import Literal
ProfileState = Literal["performance", "powersave", "transitioning"]
