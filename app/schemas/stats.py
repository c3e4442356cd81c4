from pydantic import BaseModel

class BuilderRateOut(BaseModel):
    builder_id: str
    full_name: str
    present_or_late_count: int
    total_counted_days: int
    rate: int
