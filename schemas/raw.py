"""
Raw upstream record shapes.

Every field is optional and unknown fields are kept: the feed renames and
drops columns across versions, so all defaulting and coalescing happens in
the mappers. Field names follow the feed's PascalCase columns.
"""

from pydantic import BaseModel
from typing import Optional, Union

# Ids arrive as ints from the v4 feed and as strings from some older sets
RawId = Optional[Union[int, str]]


class RawRecord(BaseModel):
    class Config:
        extra = "allow"
        populate_by_name = True


class RawFaction(RawRecord):
    FactionID: RawId = None
    ID: RawId = None
    Id: RawId = None
    FactionName: Optional[str] = None
    Name: Optional[str] = None
    ShortName: Optional[str] = None
    KnessetNum: Optional[int] = None
    CountOfMembers: Optional[int] = None
    IsCurrent: Optional[bool] = None
    StartDate: Optional[str] = None
    EndDate: Optional[str] = None
    FinishDate: Optional[str] = None
    LastUpdatedDate: Optional[str] = None


class RawMember(RawRecord):
    PersonID: RawId = None
    MemberID: RawId = None
    ID: RawId = None
    Id: RawId = None
    FirstName: Optional[str] = None
    LastName: Optional[str] = None
    FullName: Optional[str] = None
    GenderID: Optional[int] = None
    GenderDesc: Optional[str] = None
    IsCurrent: Optional[bool] = None
    IsActive: Optional[bool] = None
    FactionID: RawId = None
    FactionName: Optional[str] = None
    LastUpdatedDate: Optional[str] = None


class RawMemberFaction(RawRecord):
    PersonToPositionID: RawId = None
    PersonID: RawId = None
    MemberID: RawId = None
    FactionID: RawId = None
    FactionName: Optional[str] = None
    KnessetNum: Optional[int] = None
    StartDate: Optional[str] = None
    EndDate: Optional[str] = None
    FinishDate: Optional[str] = None
    IsCurrent: Optional[bool] = None


class RawBill(RawRecord):
    BillID: RawId = None
    ID: RawId = None
    Id: RawId = None
    KnessetNum: Optional[int] = None
    Name: Optional[str] = None
    Title: Optional[str] = None
    BillName: Optional[str] = None
    SummaryLaw: Optional[str] = None
    SubmitDate: Optional[str] = None
    PublicationDate: Optional[str] = None
    LastUpdatedDate: Optional[str] = None
    StatusID: Optional[int] = None
    StatusDesc: Optional[str] = None
    SubTypeID: Optional[int] = None
    SubTypeDesc: Optional[str] = None
    IsGovernmentBill: Optional[bool] = None


class RawBillInitiator(RawRecord):
    BillInitiatorID: RawId = None
    BillID: RawId = None
    PersonID: RawId = None
    MemberID: RawId = None
    IsInitiator: Optional[bool] = None


class RawBillStage(RawRecord):
    BillHistoryInitiatorID: RawId = None
    BillHistoryID: RawId = None
    BillID: RawId = None
    StageID: Optional[int] = None
    StageName: Optional[str] = None
    StageDesc: Optional[str] = None
    StageDate: Optional[str] = None
    StartDate: Optional[str] = None
    EndDate: Optional[str] = None
    ReasonDesc: Optional[str] = None


class RawCommittee(RawRecord):
    CommitteeID: RawId = None
    ID: RawId = None
    Id: RawId = None
    Name: Optional[str] = None
    CommitteeName: Optional[str] = None
    KnessetNum: Optional[int] = None
    StartDate: Optional[str] = None
    FinishDate: Optional[str] = None
    IsCurrent: Optional[bool] = None
    LastUpdatedDate: Optional[str] = None


class RawCommitteeMember(RawRecord):
    CommitteeID: RawId = None
    PersonID: RawId = None
    MemberID: RawId = None
    RoleDesc: Optional[str] = None
    DutyDesc: Optional[str] = None
    StartDate: Optional[str] = None
    EndDate: Optional[str] = None
    FinishDate: Optional[str] = None
    IsCurrent: Optional[bool] = None


class RawPersonToPosition(RawRecord):
    PersonToPositionID: RawId = None
    Id: RawId = None
    PersonID: RawId = None
    PositionID: Optional[int] = None
    KnessetNum: Optional[int] = None
    StartDate: Optional[str] = None
    FinishDate: Optional[str] = None
    GovMinistryID: Optional[int] = None
    GovMinistryName: Optional[str] = None
    DutyDesc: Optional[str] = None
    GovernmentNum: Optional[int] = None
    CommitteeID: RawId = None
    IsCurrent: Optional[bool] = None
    LastUpdatedDate: Optional[str] = None


class RawVoteHeader(RawRecord):
    Id: RawId = None
    VoteDateTime: Optional[str] = None
    VoteTitle: Optional[str] = None
    VoteSubject: Optional[str] = None
    KnessetNum: Optional[int] = None
    ForOptionDesc: Optional[str] = None
    AgainstOptionDesc: Optional[str] = None
    TotalFor: Optional[int] = None
    TotalAgainst: Optional[int] = None
    TotalAbstain: Optional[int] = None
    LastUpdatedDate: Optional[str] = None


class RawVoteResult(RawRecord):
    Id: RawId = None
    MkId: RawId = None
    VoteID: RawId = None
    ResultCode: Optional[int] = None
    ResultDesc: Optional[str] = None
    VoteDate: Optional[str] = None
