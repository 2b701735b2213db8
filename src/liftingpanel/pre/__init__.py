from liftingpanel.pre.mesh import PanelSurface
from liftingpanel.pre.generators import naca_wing, wedge_wing
