"""Pipeline core: orchestration, admission control, hashing and jar editing."""
