# import all models so Base.metadata knows every table
from termplan.db.models.snapshot import AppSnapshot
